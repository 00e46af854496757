"""In-process stores, for development and testing."""

import itertools
import secrets
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from .. import util
from ..domain import User, Session, VerificationCode, VerificationCodeType
from ..exceptions import Conflict
from . import CredentialStore, SessionStore, VerificationCodeStore


class MemoryCredentialStore(CredentialStore):
    """Keeps users in a dict."""

    def __init__(self) -> None:
        self.users: Dict[str, User] = {}
        self._ids = itertools.count(1)

    def exists(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def create(self, email: str, password_hash: str) -> User:
        if self.exists(email):
            raise Conflict('Email already in use')
        user = User(user_id=str(next(self._ids)), email=email,
                    password_hash=password_hash, created_at=util.now())
        self.users[user.user_id] = user
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def update_verified(self, user_id: str) -> Optional[User]:
        return self._update(user_id, verified=True)

    def update_password_hash(self, user_id: str,
                             password_hash: str) -> Optional[User]:
        return self._update(user_id, password_hash=password_hash)

    def _update(self, user_id: str, **changes: object) -> Optional[User]:
        user = self.users.get(user_id)
        if user is None:
            return None
        user = user._replace(**changes)
        self.users[user_id] = user
        return user


class MemorySessionStore(SessionStore):
    """Keeps sessions in a dict."""

    def __init__(self) -> None:
        self.sessions: Dict[str, Session] = {}

    def create(self, user_id: str, expires_at: datetime,
               user_agent: Optional[str] = None) -> Session:
        session = Session(session_id=str(uuid.uuid4()), user_id=user_id,
                          expires_at=expires_at, created_at=util.now(),
                          user_agent=user_agent)
        self.sessions[session.session_id] = session
        return session

    def find_by_id(self, session_id: str) -> Optional[Session]:
        return self.sessions.get(session_id)

    def save(self, session: Session) -> None:
        self.sessions[session.session_id] = session

    def find_live_for_user(self, user_id: str,
                           at: datetime) -> List[Session]:
        live = [s for s in self.sessions.values()
                if s.user_id == user_id and s.expires_at > at]
        return sorted(live, key=lambda s: s.created_at, reverse=True)

    def delete(self, session_id: str, user_id: Optional[str] = None) -> bool:
        session = self.sessions.get(session_id)
        if session is None:
            return False
        if user_id is not None and session.user_id != user_id:
            return False
        del self.sessions[session_id]
        return True

    def delete_all_for_user(self, user_id: str) -> None:
        for session_id in [s.session_id for s in self.sessions.values()
                           if s.user_id == user_id]:
            del self.sessions[session_id]


class MemoryVerificationCodeStore(VerificationCodeStore):
    """Keeps verification codes in a dict."""

    def __init__(self) -> None:
        self.codes: Dict[str, VerificationCode] = {}

    def create(self, user_id: str, code_type: VerificationCodeType,
               expires_at: datetime) -> VerificationCode:
        code = VerificationCode(code_id=secrets.token_urlsafe(32),
                                user_id=user_id, code_type=code_type,
                                expires_at=expires_at, created_at=util.now())
        self.codes[code.code_id] = code
        return code

    def find_valid(self, code_id: str, code_type: VerificationCodeType,
                   at: datetime) -> Optional[VerificationCode]:
        code = self.codes.get(code_id)
        if code is None or code.code_type != code_type \
                or code.expires_at <= at:
            return None
        return code

    def count_since(self, user_id: str, code_type: VerificationCodeType,
                    since: datetime) -> int:
        return len([c for c in self.codes.values()
                    if c.user_id == user_id and c.code_type == code_type
                    and c.created_at > since])

    def delete(self, code: VerificationCode) -> None:
        self.codes.pop(code.code_id, None)
