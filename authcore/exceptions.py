"""Exceptions."""


class AuthError(RuntimeError):
    """
    Base class for failures that are reported to the caller.

    Each failure carries a :attr:`kind`, the HTTP :attr:`status_code` that the
    transport layer should use for it, and a human-readable message.
    """

    kind = 'internal_error'
    status_code = 500

    def __init__(self, message: str = '') -> None:
        """Set the human-readable message."""
        super(AuthError, self).__init__(message)
        self.message = message


class Conflict(AuthError):
    """The requested resource already exists (e.g. e-mail in use)."""

    kind = 'conflict'
    status_code = 409


class Unauthorized(AuthError):
    """Credentials, token or session are not valid."""

    kind = 'unauthorized'
    status_code = 401


class NotFound(AuthError):
    """The requested resource does not exist, or has expired."""

    kind = 'not_found'
    status_code = 404


class TooManyRequests(AuthError):
    """A throttled operation was attempted too often."""

    kind = 'too_many_requests'
    status_code = 429


class InternalError(AuthError):
    """A downstream write or delivery failed."""

    kind = 'internal_error'
    status_code = 500


class InvalidToken(ValueError):
    """Token is forged, expired, malformed, or meant for someone else."""


class StoreUnavailable(RuntimeError):
    """A backing store could not be reached."""
