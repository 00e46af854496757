"""
Interfaces to the stores that hold users, sessions and verification codes.

Implementations live in :mod:`.memory` (in-process), :mod:`.database`
(SQLAlchemy) and :mod:`.redis_sessions` (sessions only). Expiry is never
swept by a store; callers compare ``expires_at`` against the current time
when a record is used.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..domain import User, Session, VerificationCode, VerificationCodeType


class CredentialStore(ABC):
    """Durable user records, keyed by unique e-mail address."""

    @abstractmethod
    def exists(self, email: str) -> bool:
        """Determine whether a user with ``email`` already exists."""

    @abstractmethod
    def create(self, email: str, password_hash: str) -> User:
        """
        Create a new, unverified user.

        Raises
        ------
        :class:`.Conflict`
            If the e-mail address is already in use.

        """

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        """Get a user by exact e-mail address."""

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""

    @abstractmethod
    def update_verified(self, user_id: str) -> Optional[User]:
        """Mark a user's e-mail as verified; ``None`` if there is no user."""

    @abstractmethod
    def update_password_hash(self, user_id: str,
                             password_hash: str) -> Optional[User]:
        """Replace a user's password hash; ``None`` if there is no user."""


class SessionStore(ABC):
    """Durable session records, keyed by session ID."""

    @abstractmethod
    def create(self, user_id: str, expires_at: datetime,
               user_agent: Optional[str] = None) -> Session:
        """Create a new session for ``user_id``."""

    @abstractmethod
    def find_by_id(self, session_id: str) -> Optional[Session]:
        """Get a session by ID, whether or not it is expired."""

    @abstractmethod
    def save(self, session: Session) -> None:
        """Persist a session whose ``expires_at`` has changed."""

    @abstractmethod
    def find_live_for_user(self, user_id: str,
                           at: datetime) -> List[Session]:
        """Get the user's sessions that expire after ``at``, newest first."""

    @abstractmethod
    def delete(self, session_id: str, user_id: Optional[str] = None) -> bool:
        """
        Delete a session.

        If ``user_id`` is given, the session is only deleted if it belongs to
        that user. Returns ``True`` if a session was deleted.
        """

    @abstractmethod
    def delete_all_for_user(self, user_id: str) -> None:
        """Delete every session belonging to ``user_id``."""


class VerificationCodeStore(ABC):
    """Durable single-use codes, keyed by the code itself."""

    @abstractmethod
    def create(self, user_id: str, code_type: VerificationCodeType,
               expires_at: datetime) -> VerificationCode:
        """Issue a new code."""

    @abstractmethod
    def find_valid(self, code_id: str, code_type: VerificationCodeType,
                   at: datetime) -> Optional[VerificationCode]:
        """Get a code of ``code_type`` that expires after ``at``."""

    @abstractmethod
    def count_since(self, user_id: str, code_type: VerificationCodeType,
                    since: datetime) -> int:
        """Count codes of ``code_type`` issued to a user after ``since``."""

    @abstractmethod
    def delete(self, code: VerificationCode) -> None:
        """Delete (consume) a code."""
