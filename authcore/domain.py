"""Defines the user, session and verification code concepts."""

from typing import Any, Optional, NamedTuple, Union
from datetime import datetime
from enum import Enum
import typing

import dateutil.parser

from . import util


class VerificationCodeType(str, Enum):
    """Uses to which a :class:`.VerificationCode` can be put."""

    EMAIL_VERIFICATION = 'email_verification'
    PASSWORD_RESET = 'password_reset'


class PublicUser(NamedTuple):
    """The representation of a :class:`.User` that is safe to hand out."""

    user_id: str
    """Unique identifier for the user."""

    email: str
    """The user's e-mail address."""

    verified: bool = False
    """Whether or not the user's e-mail address has been verified."""

    created_at: Optional[datetime] = None
    """When the account was created."""


class User(NamedTuple):
    """Represents a user account, including its password hash."""

    user_id: str
    """Unique identifier for the user, assigned by the store."""

    email: str
    """The user's e-mail address. Unique, and case-sensitive as stored."""

    password_hash: str
    """Opaque hash of the user's password. Never leaves the core."""

    verified: bool = False
    """Whether or not the user's e-mail address has been verified."""

    created_at: Optional[datetime] = None
    """When the account was created."""

    def omit_password(self) -> PublicUser:
        """Strip the password hash from this user."""
        return PublicUser(user_id=self.user_id, email=self.email,
                          verified=self.verified, created_at=self.created_at)


class Session(NamedTuple):
    """An authenticated device or browser, bound to a single user."""

    session_id: str
    """Unique identifier for the session."""

    user_id: str
    """The user for which the session was created."""

    expires_at: datetime
    """Absolute time at which the session stops being live."""

    created_at: datetime
    """When the session was created."""

    user_agent: Optional[str] = None
    """User-agent of the client for which the session was created."""

    def remaining(self, at: Optional[datetime] = None) -> float:
        """Number of seconds (possibly negative) until the session expires."""
        if at is None:
            at = util.now()
        return (self.expires_at - at).total_seconds()


class VerificationCode(NamedTuple):
    """A single-use, typed, time-boxed secret."""

    code_id: str
    """The secret itself; handed to the user in a link."""

    user_id: str
    """The user to whom the code was issued."""

    code_type: VerificationCodeType
    """What the code may be used for."""

    expires_at: datetime
    """Absolute time after which the code is no longer valid."""

    created_at: datetime
    """When the code was issued."""


class AuthResult(NamedTuple):
    """Outcome of account creation and login."""

    user: PublicUser
    access_token: str
    refresh_token: str


class RefreshResult(NamedTuple):
    """
    Outcome of a token refresh.

    :attr:`.refresh_token` is only set if the session was renewed; otherwise
    the refresh token already held by the caller remains valid.
    """

    access_token: str
    refresh_token: Optional[str] = None


class PasswordResetRequested(NamedTuple):
    """
    Outcome of a password-reset request.

    The caller always gets one of these. Both fields are set only if a reset
    e-mail was actually delivered; otherwise both are ``None``.
    """

    url: Optional[str] = None
    delivery_id: Optional[str] = None


class AccessClaims(NamedTuple):
    """Claims carried by a verified access token."""

    user_id: str
    session_id: str


class SessionInfo(NamedTuple):
    """Summary of a live session, for display to its owner."""

    session_id: str
    created_at: datetime
    expires_at: datetime
    user_agent: Optional[str] = None
    is_current: bool = False


# Helpers and private functions.


def to_dict(obj: tuple) -> dict:
    """
    Generate a dict representation of a NamedTuple instance.

    Child NamedTuples are cast recursively, :class:`.datetime` values are
    rendered in ISO-8601 format, and enum members are replaced by their
    values, so that the result can be dumped as JSON.

    Parameters
    ----------
    obj : tuple
        A NamedTuple instance.

    Returns
    -------
    dict

    """
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return {}

    def _cast(value: Any) -> Any:
        if hasattr(value, '_asdict'):
            return to_dict(value)
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, list):
            return [_cast(o) for o in value]
        return value

    return {key: _cast(value) for key, value in obj._asdict().items()}


def from_dict(cls: type, data: dict) -> Any:
    """
    Generate a NamedTuple instance from a dict.

    This is the inverse of :func:`to_dict`. Keys in ``data`` that are not
    fields of ``cls`` are ignored.

    Parameters
    ----------
    cls: type
        Any NamedTuple class.
    data: dict
        Data with which to instantiate ``cls``.

    Returns
    -------
    NamedTuple
        An instance of ``cls``.

    """
    _data = {}
    for field, field_type in typing.get_type_hints(cls).items():
        if field not in data:
            continue
        _data[field] = _cast_to(_unwrap_optional(field_type), data[field])
    return cls(**_data)


def _unwrap_optional(field_type: Any) -> Any:
    """Get ``X`` from ``Optional[X]``; other types are returned as-is."""
    if typing.get_origin(field_type) is Union:
        args = [a for a in typing.get_args(field_type) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return field_type


def _cast_to(field_type: Any, value: Any) -> Any:
    if value is None:
        return None
    if field_type is datetime and isinstance(value, str):
        return dateutil.parser.parse(value)
    if _is_a_namedtuple(field_type) and isinstance(value, dict):
        return from_dict(field_type, value)
    if isinstance(field_type, type) and issubclass(field_type, Enum):
        return field_type(value)
    return value


def _is_a_namedtuple(field_type: Any) -> bool:
    """Determine whether or not a field type is a NamedTuple class."""
    return isinstance(field_type, type) and hasattr(field_type, '_fields')
