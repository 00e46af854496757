"""
SQLAlchemy-backed stores.

All three stores can share one :class:`.Database`, which owns the engine
and hands out sessions via :meth:`.Database.transaction`.
"""

import logging
import secrets
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Generator, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session as DBConnection

from ... import util
from ...domain import User, Session, VerificationCode, VerificationCodeType
from ...exceptions import Conflict, StoreUnavailable
from .. import CredentialStore, SessionStore, VerificationCodeStore
from .models import Base, DBUser, DBSession, DBVerificationCode

logger = logging.getLogger(__name__)


class Database(object):
    """A connection pool for one database."""

    def __init__(self, uri: str, echo: bool = False) -> None:
        if uri.startswith('sqlite'):
            args = {"check_same_thread": False}
        else:
            args = {}
        self.engine = create_engine(uri, echo=echo, connect_args=args)
        self._sessions = sessionmaker(autocommit=False, autoflush=False,
                                      bind=self.engine)

    @contextmanager
    def transaction(self) -> Generator[DBConnection, None, None]:
        """Context manager for database transaction."""
        session = self._sessions()
        try:
            yield session
            session.commit()
        except OperationalError as e:
            logger.error('Database unavailable, rolling back: %s', e)
            session.rollback()
            raise StoreUnavailable(str(e)) from e
        except Exception as e:
            logger.error('Commit failed, rolling back: %s', str(e))
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """Create all tables in the database."""
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        """Drop all tables in the database."""
        Base.metadata.drop_all(self.engine)


class DatabaseCredentialStore(CredentialStore):
    """Users in the ``authcore_users`` table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def exists(self, email: str) -> bool:
        with self._db.transaction() as session:
            data = session.query(DBUser.user_id) \
                .filter(DBUser.email == email) \
                .first()
            return data is not None

    def create(self, email: str, password_hash: str) -> User:
        try:
            with self._db.transaction() as session:
                db_user = DBUser(email=email, password_hash=password_hash,
                                 flag_email_verified=0,
                                 joined_date=util.epoch(util.now()))
                session.add(db_user)
                session.flush()  # Assigns user_id.
                return db_user.to_domain()
        except IntegrityError as e:
            raise Conflict('Email already in use') from e

    def find_by_email(self, email: str) -> Optional[User]:
        with self._db.transaction() as session:
            db_user = session.query(DBUser) \
                .filter(DBUser.email == email) \
                .first()
            return db_user.to_domain() if db_user else None

    def find_by_id(self, user_id: str) -> Optional[User]:
        if _as_int(user_id) is None:
            return None
        with self._db.transaction() as session:
            db_user = session.get(DBUser, _as_int(user_id))
            return db_user.to_domain() if db_user else None

    def update_verified(self, user_id: str) -> Optional[User]:
        if _as_int(user_id) is None:
            return None
        with self._db.transaction() as session:
            db_user = session.get(DBUser, _as_int(user_id))
            if db_user is None:
                return None
            db_user.flag_email_verified = 1
            return db_user.to_domain()

    def update_password_hash(self, user_id: str,
                             password_hash: str) -> Optional[User]:
        if _as_int(user_id) is None:
            return None
        with self._db.transaction() as session:
            db_user = session.get(DBUser, _as_int(user_id))
            if db_user is None:
                return None
            db_user.password_hash = password_hash
            return db_user.to_domain()


class DatabaseSessionStore(SessionStore):
    """Sessions in the ``authcore_sessions`` table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def create(self, user_id: str, expires_at: datetime,
               user_agent: Optional[str] = None) -> Session:
        with self._db.transaction() as session:
            db_session = DBSession(
                session_id=str(uuid.uuid4()),
                user_id=_as_int(user_id),
                user_agent=user_agent[:255] if user_agent else None,
                start_time=util.epoch(util.now()),
                end_time=util.epoch(expires_at)
            )
            session.add(db_session)
            session.flush()
            return db_session.to_domain()

    def find_by_id(self, session_id: str) -> Optional[Session]:
        with self._db.transaction() as session:
            db_session = session.get(DBSession, session_id)
            return db_session.to_domain() if db_session else None

    def save(self, user_session: Session) -> None:
        with self._db.transaction() as session:
            db_session = session.get(DBSession, user_session.session_id)
            if db_session is None:
                logger.error('No session found with id %s',
                             user_session.session_id)
                return
            db_session.end_time = util.epoch(user_session.expires_at)

    def find_live_for_user(self, user_id: str,
                           at: datetime) -> List[Session]:
        with self._db.transaction() as session:
            rows = session.query(DBSession) \
                .filter(DBSession.user_id == _as_int(user_id)) \
                .filter(DBSession.end_time > util.epoch(at)) \
                .order_by(DBSession.start_time.desc()) \
                .all()
            return [row.to_domain() for row in rows]

    def delete(self, session_id: str, user_id: Optional[str] = None) -> bool:
        with self._db.transaction() as session:
            query = session.query(DBSession) \
                .filter(DBSession.session_id == session_id)
            if user_id is not None:
                query = query.filter(DBSession.user_id == _as_int(user_id))
            return query.delete() > 0

    def delete_all_for_user(self, user_id: str) -> None:
        with self._db.transaction() as session:
            session.query(DBSession) \
                .filter(DBSession.user_id == _as_int(user_id)) \
                .delete()


class DatabaseVerificationCodeStore(VerificationCodeStore):
    """Codes in the ``authcore_verification_codes`` table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def create(self, user_id: str, code_type: VerificationCodeType,
               expires_at: datetime) -> VerificationCode:
        with self._db.transaction() as session:
            db_code = DBVerificationCode(
                code_id=secrets.token_urlsafe(32),
                user_id=_as_int(user_id),
                code_type=code_type.value,
                expires_at=util.epoch(expires_at),
                created_at=util.epoch(util.now())
            )
            session.add(db_code)
            session.flush()
            return db_code.to_domain()

    def find_valid(self, code_id: str, code_type: VerificationCodeType,
                   at: datetime) -> Optional[VerificationCode]:
        with self._db.transaction() as session:
            db_code = session.query(DBVerificationCode) \
                .filter(DBVerificationCode.code_id == code_id) \
                .filter(DBVerificationCode.code_type == code_type.value) \
                .filter(DBVerificationCode.expires_at > util.epoch(at)) \
                .first()
            return db_code.to_domain() if db_code else None

    def count_since(self, user_id: str, code_type: VerificationCodeType,
                    since: datetime) -> int:
        with self._db.transaction() as session:
            count: int = session.query(DBVerificationCode) \
                .filter(DBVerificationCode.user_id == _as_int(user_id)) \
                .filter(DBVerificationCode.code_type == code_type.value) \
                .filter(DBVerificationCode.created_at > util.epoch(since)) \
                .count()
            return count

    def delete(self, code: VerificationCode) -> None:
        with self._db.transaction() as session:
            session.query(DBVerificationCode) \
                .filter(DBVerificationCode.code_id == code.code_id) \
                .delete()


def _as_int(user_id: str) -> Optional[int]:
    """User IDs are integers in the database; anything else matches none."""
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None
