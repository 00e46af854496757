"""Application factory for the authentication core."""

import logging
from typing import Optional

from . import config as _config
from .config import AuthConfig
from .mail import Mailer, SMTPMailer
from .passwords import PasswordHasher
from .service import AuthCore
from .stores import SessionStore
from .stores.database import Database, DatabaseCredentialStore, \
    DatabaseSessionStore, DatabaseVerificationCodeStore
from .stores.redis_sessions import RedisSessionStore
from .tokens import TokenSigner

logger = logging.getLogger(__name__)


def create_auth_core(config: Optional[AuthConfig] = None,
                     mailer: Optional[Mailer] = None) -> AuthCore:
    """
    Wire an :class:`.AuthCore` from configuration.

    Users and verification codes live in the database at
    :attr:`.AuthConfig.database_uri`; sessions live either there or in Redis,
    per :attr:`.AuthConfig.session_backend`. Tables are created if they do not
    exist.

    Parameters
    ----------
    config : :class:`.AuthConfig`
        Loaded from the environment if not given.
    mailer : :class:`.Mailer`
        Defaults to an :class:`.SMTPMailer` built from ``config``.

    """
    if config is None:
        config = _config.from_environ()
    if config.jwt_secret == config.jwt_refresh_secret:
        raise ValueError('Access and refresh tokens need distinct secrets')

    db = Database(config.database_uri)
    db.create_all()

    sessions: SessionStore
    if config.session_backend == 'redis':
        sessions = RedisSessionStore(config.redis_host, config.redis_port,
                                     config.redis_database,
                                     cluster=config.redis_cluster)
    elif config.session_backend == 'database':
        sessions = DatabaseSessionStore(db)
    else:
        raise ValueError(f'Unknown session backend {config.session_backend}')
    logger.debug('Using %s session store', config.session_backend)

    if mailer is None:
        mailer = SMTPMailer(config.smtp_host, config.smtp_port,
                            sender=config.mail_from, user=config.smtp_user,
                            password=config.smtp_password)

    return AuthCore(
        users=DatabaseCredentialStore(db),
        sessions=sessions,
        codes=DatabaseVerificationCodeStore(db),
        signer=TokenSigner(),
        mailer=mailer,
        hasher=PasswordHasher(config.password_hash_iterations),
        config=config
    )
