"""Configuration for the authentication core."""

import os
from datetime import timedelta
from typing import Mapping, NamedTuple, Optional


class AuthConfig(NamedTuple):
    """Settings passed to :class:`.AuthCore` and its collaborators."""

    app_origin: str = 'http://localhost:3000'
    """Origin of the front-end; links in e-mails are built on it."""

    jwt_secret: str = 'foosecret'
    """Secret used to sign access tokens."""

    jwt_refresh_secret: str = 'foorefreshsecret'
    """Secret used to sign refresh tokens. Must differ from the above."""

    access_token_ttl: timedelta = timedelta(minutes=15)
    refresh_token_ttl: timedelta = timedelta(days=30)

    session_duration: timedelta = timedelta(days=30)
    """Lifetime of a new (or renewed) session."""

    session_renewal_threshold: timedelta = timedelta(days=1)
    """Sessions with at most this much lifetime left are renewed on refresh."""

    email_verification_ttl: timedelta = timedelta(days=365)
    password_reset_ttl: timedelta = timedelta(hours=1)

    password_reset_window: timedelta = timedelta(minutes=5)
    password_reset_limit: int = 2
    """Reset codes that may be issued to a user per rolling window."""

    password_hash_iterations: int = 260000

    database_uri: str = 'sqlite:///authcore.db'
    session_backend: str = 'database'
    """Either ``database`` or ``redis``."""

    redis_host: str = 'localhost'
    redis_port: int = 7000
    redis_database: int = 0
    redis_cluster: bool = False

    smtp_host: str = 'localhost'
    smtp_port: int = 25
    smtp_user: str = ''
    smtp_password: str = ''
    mail_from: str = 'no-reply@localhost'


def _seconds(environ: Mapping[str, str], key: str,
             default: timedelta) -> timedelta:
    value = environ.get(key)
    if value is None:
        return default
    return timedelta(seconds=int(value))


def from_environ(environ: Optional[Mapping[str, str]] = None) -> AuthConfig:
    """
    Load an :class:`.AuthConfig` from environment variables.

    Variables that are not set fall back to the defaults on
    :class:`.AuthConfig`.

    Parameters
    ----------
    environ : mapping
        Defaults to ``os.environ``.

    Returns
    -------
    :class:`.AuthConfig`

    Raises
    ------
    :class:`ValueError`
        If a numeric setting is malformed.

    """
    if environ is None:
        environ = os.environ
    d = AuthConfig()
    return AuthConfig(
        app_origin=environ.get('APP_ORIGIN', d.app_origin),
        jwt_secret=environ.get('JWT_SECRET', d.jwt_secret),
        jwt_refresh_secret=environ.get('JWT_REFRESH_SECRET',
                                       d.jwt_refresh_secret),
        access_token_ttl=_seconds(environ, 'ACCESS_TOKEN_TTL',
                                  d.access_token_ttl),
        refresh_token_ttl=_seconds(environ, 'REFRESH_TOKEN_TTL',
                                   d.refresh_token_ttl),
        session_duration=_seconds(environ, 'SESSION_DURATION',
                                  d.session_duration),
        session_renewal_threshold=_seconds(environ,
                                           'SESSION_RENEWAL_THRESHOLD',
                                           d.session_renewal_threshold),
        email_verification_ttl=_seconds(environ, 'EMAIL_VERIFICATION_TTL',
                                        d.email_verification_ttl),
        password_reset_ttl=_seconds(environ, 'PASSWORD_RESET_TTL',
                                    d.password_reset_ttl),
        password_reset_window=_seconds(environ, 'PASSWORD_RESET_WINDOW',
                                       d.password_reset_window),
        password_reset_limit=int(environ.get('PASSWORD_RESET_LIMIT',
                                             d.password_reset_limit)),
        password_hash_iterations=int(environ.get(
            'PASSWORD_HASH_ITERATIONS', d.password_hash_iterations
        )),
        database_uri=environ.get('DATABASE_URI', d.database_uri),
        session_backend=environ.get('SESSION_BACKEND', d.session_backend),
        redis_host=environ.get('REDIS_HOST', d.redis_host),
        redis_port=int(environ.get('REDIS_PORT', d.redis_port)),
        redis_database=int(environ.get('REDIS_DATABASE', d.redis_database)),
        redis_cluster=environ.get('REDIS_CLUSTER', '0') == '1',
        smtp_host=environ.get('SMTP_HOST', d.smtp_host),
        smtp_port=int(environ.get('SMTP_PORT', d.smtp_port)),
        smtp_user=environ.get('SMTP_USER', d.smtp_user),
        smtp_password=environ.get('SMTP_PASSWORD', d.smtp_password),
        mail_from=environ.get('MAIL_FROM', d.mail_from),
    )
