"""Week lifecycle: closing a period and starting the next one."""

from __future__ import annotations

import typing as typ

from bonustally.common.time import SystemClock
from bonustally.logging import get_logger, log_info
from bonustally.reporting.bonus import build_bonus_report

if typ.TYPE_CHECKING:
    import datetime as dt

    from bonustally.common.time import Clock
    from bonustally.ledger.service import SalesLedger
    from bonustally.reporting.bonus import BonusReport

logger = get_logger(__name__)


class WeekLifecycle:
    """Reset the ledger at the end of each accrual week."""

    def __init__(self, ledger: SalesLedger, *, clock: Clock | None = None) -> None:
        """Bind the lifecycle to the ledger it resets."""
        self._ledger = ledger
        self._clock = clock or SystemClock()

    @property
    def period_start(self) -> dt.datetime:
        """Return the start of the current period."""
        return self._ledger.period_start

    def reset(self) -> dt.datetime:
        """Empty the ledger and start a new period now.

        Returns the new period start.
        """
        now = self._clock.now()
        previous = self._ledger.reset(now)
        log_info(
            logger,
            "[week.reset] previous_start=%s employees=%d new_start=%s",
            previous.period_start.isoformat(),
            len(previous.employees),
            now.isoformat(),
        )
        return now

    def close_week(self, rate: int) -> BonusReport:
        """Report on the current period, then reset it."""
        report = build_bonus_report(
            self._ledger.snapshot(), rate, generated_at=self._clock.now()
        )
        self.reset()
        log_info(
            logger,
            "[week.closed] employees=%d total_sales=%d total_bonus=%d rate=%d",
            len(report.lines),
            report.total_sales,
            report.total_bonus,
            rate,
        )
        return report
