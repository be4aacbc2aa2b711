"""Weekly accrual period lifecycle and scheduled close."""

from __future__ import annotations

from .errors import ScheduleError
from .schedule import WEEKDAYS, WeeklyCloseTrigger, WeeklySchedule
from .week import WeekLifecycle

__all__ = [
    "WEEKDAYS",
    "ScheduleError",
    "WeekLifecycle",
    "WeeklyCloseTrigger",
    "WeeklySchedule",
]
