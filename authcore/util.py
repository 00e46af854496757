"""Time helpers."""

from datetime import datetime
from pytz import UTC


def now() -> datetime:
    """Get the current time, in UTC."""
    return datetime.now(tz=UTC)


def epoch(t: datetime) -> int:
    """Convert a :class:`.datetime` to UNIX time."""
    delta = t - datetime.fromtimestamp(0, tz=UTC)
    return int(round(delta.total_seconds()))


def epoch_ms(t: datetime) -> int:
    """Convert a :class:`.datetime` to UNIX time in milliseconds."""
    delta = t - datetime.fromtimestamp(0, tz=UTC)
    return int(round(delta.total_seconds() * 1000))


def from_epoch(t: int) -> datetime:
    """Get a :class:`datetime` from an UNIX timestamp."""
    return datetime.fromtimestamp(t, tz=UTC)
