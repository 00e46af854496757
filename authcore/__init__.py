"""
Issues and manages user credentials, sessions and verification codes.

.. code-block:: python

   from authcore.factory import create_auth_core

   core = create_auth_core()
   result = core.create_account('a@x.com', 'pw1', user_agent='curl/8.0')

"""
