"""Subjects and bodies for the messages sent by the core."""

from html import escape
from typing import NamedTuple


class Template(NamedTuple):
    subject: str
    html: str


_LAYOUT = """<!doctype html>
<html>
  <body style="font-family: sans-serif;">
    <h1>{heading}</h1>
    <p>{text}</p>
    <p><a href="{url}">{action}</a></p>
    <p style="color: #666;">If you did not request this, you can ignore this
    message.</p>
  </body>
</html>
"""


def verify_email(url: str) -> Template:
    """Message asking the user to confirm their e-mail address."""
    return Template(
        subject='Verify your email address',
        html=_LAYOUT.format(
            heading='Verify your email address',
            text='Click the link below to verify your email address.',
            url=escape(url),
            action='Verify email'
        )
    )


def password_reset(url: str, valid_minutes: int = 60) -> Template:
    """Message carrying a password-reset link."""
    return Template(
        subject='Password reset request',
        html=_LAYOUT.format(
            heading='Reset your password',
            text='Click the link below to reset your password. The link '
                 f'expires in {valid_minutes} minutes.',
            url=escape(url),
            action='Reset password'
        )
    )
