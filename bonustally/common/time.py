"""Clock abstraction and timezone helpers."""

from __future__ import annotations

import dataclasses
import datetime as dt
import typing as typ

if typ.TYPE_CHECKING:
    from zoneinfo import ZoneInfo


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


class Clock(typ.Protocol):
    """Source of the current time, injectable so tests can move time."""

    def now(self) -> dt.datetime:
        """Return the current aware timestamp."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class SystemClock:
    """Wall-clock implementation of :class:`Clock`."""

    def now(self) -> dt.datetime:
        """Return the current UTC time."""
        return utcnow()


def ensure_aware(value: dt.datetime) -> dt.datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.UTC)
    return value


def to_local(value: dt.datetime, tz: ZoneInfo) -> dt.datetime:
    """Convert ``value`` into the configured local zone."""
    return ensure_aware(value).astimezone(tz)
