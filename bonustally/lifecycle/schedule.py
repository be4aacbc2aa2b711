"""Weekly close trigger driven by an injectable clock.

The runtime polls :meth:`WeeklyCloseTrigger.check` on a fixed interval. The
trigger compares local wall time with the configured weekday, hour and
minute, and remembers the minute it last fired in so a poll interval shorter
than a minute cannot close the same week twice.
"""

from __future__ import annotations

import dataclasses
import re
import typing as typ

from bonustally.common.time import SystemClock, to_local
from bonustally.logging import get_logger, log_info

from .errors import ScheduleError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt
    from zoneinfo import ZoneInfo

    from bonustally.common.time import Clock

logger = get_logger(__name__)

WEEKDAYS: dict[str, int] = {
    "mon": 0,
    "tue": 1,
    "wed": 2,
    "thu": 3,
    "fri": 4,
    "sat": 5,
    "sun": 6,
}
_WEEKDAY_NAMES = {index: name for name, index in WEEKDAYS.items()}
_SCHEDULE_RE = re.compile(r"^\s*([a-z]{3})[a-z]*\s+(\d{1,2}):(\d{2})\s*$", re.IGNORECASE)
_MAX_HOUR = 23
_MAX_MINUTE = 59


@dataclasses.dataclass(frozen=True, slots=True)
class WeeklySchedule:
    """Local weekday and time at which the week closes."""

    tz: ZoneInfo
    weekday: int = 6
    hour: int = 23
    minute: int = 0

    @classmethod
    def parse(cls, raw: str, tz: ZoneInfo) -> WeeklySchedule:
        """Parse ``'<weekday> <HH:MM>'``, e.g. ``'sun 23:00'``."""
        match = _SCHEDULE_RE.match(raw)
        if match is None:
            raise ScheduleError.invalid(raw)
        day, hour_raw, minute_raw = match.groups()
        weekday = WEEKDAYS.get(day.lower())
        hour, minute = int(hour_raw), int(minute_raw)
        if weekday is None or hour > _MAX_HOUR or minute > _MAX_MINUTE:
            raise ScheduleError.invalid(raw)
        return cls(tz=tz, weekday=weekday, hour=hour, minute=minute)

    def matches(self, local: dt.datetime) -> bool:
        """Return True when ``local`` falls inside the target minute."""
        return (
            local.weekday() == self.weekday
            and local.hour == self.hour
            and local.minute == self.minute
        )

    def describe(self) -> str:
        """Return the schedule in its configuration form."""
        return f"{_WEEKDAY_NAMES[self.weekday]} {self.hour:02d}:{self.minute:02d}"


class WeeklyCloseTrigger:
    """Fire a callback once when the weekly close minute arrives."""

    def __init__(
        self,
        schedule: WeeklySchedule,
        on_fire: cabc.Callable[[dt.datetime], object],
        *,
        clock: Clock | None = None,
    ) -> None:
        """Create a trigger for ``schedule`` that calls ``on_fire``."""
        self._schedule = schedule
        self._on_fire = on_fire
        self._clock = clock or SystemClock()
        self._last_fired: dt.datetime | None = None

    @property
    def last_fired(self) -> dt.datetime | None:
        """Return the local minute the trigger last fired in."""
        return self._last_fired

    def check(self) -> bool:
        """Fire if the close minute has arrived and has not fired yet."""
        now = self._clock.now()
        local = to_local(now, self._schedule.tz)
        if not self._schedule.matches(local):
            return False

        minute = local.replace(second=0, microsecond=0)
        if minute == self._last_fired:
            return False

        self._last_fired = minute
        log_info(logger, "Weekly close triggered at %s", minute.isoformat())
        self._on_fire(now)
        return True
