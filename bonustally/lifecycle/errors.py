"""Errors raised by the weekly lifecycle."""

from __future__ import annotations


class ScheduleError(ValueError):
    """Raised when a weekly close schedule cannot be parsed."""

    @classmethod
    def invalid(cls, raw: str) -> ScheduleError:
        """Return an error for a malformed ``<weekday> <HH:MM>`` value."""
        return cls(f"close schedule must look like 'sun 23:00', got {raw!r}")
