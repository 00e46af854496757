"""Install the authcore package."""

from setuptools import setup, find_packages

setup(
    name='authcore',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    python_requires='>=3.8',
    install_requires=[
        "sqlalchemy>=1.4",
        "python-dateutil",
        "pytz",
        "pyjwt>=2.0",
        "redis>=4.1",
        "retry",
        "python-json-logger",
    ],
    extras_require={
        'test': ['pytest'],
    },
    zip_safe=False
)
