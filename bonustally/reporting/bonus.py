"""Bonus calculation over the ledger state.

Bonuses are a percentage of each employee's period total, rounded half up to
a whole unit. The calculation is pure; ranking markers and currency
formatting belong to the renderer.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from .errors import BonusRateError

if typ.TYPE_CHECKING:
    import datetime as dt

    from bonustally.ledger.models import AggregateState

MIN_BONUS_RATE = 0
MAX_BONUS_RATE = 100


def validate_bonus_rate(rate: int) -> int:
    """Return ``rate`` when it is an integer percentage in 0–100."""
    if isinstance(rate, bool) or not isinstance(rate, int):
        raise BonusRateError(rate)
    if not MIN_BONUS_RATE <= rate <= MAX_BONUS_RATE:
        raise BonusRateError(rate)
    return rate


def bonus_for(total_sales: int, rate: int) -> int:
    """Return ``total_sales * rate / 100`` rounded half up.

    Integer arithmetic keeps the half-way case exact:

    >>> bonus_for(1005, 10)
    101

    """
    return (total_sales * rate + 50) // 100


@dataclasses.dataclass(frozen=True, slots=True)
class BonusLine:
    """One employee's ranked bonus entry."""

    identifier: str
    display_name: str
    sale_count: int
    total_sales: int
    bonus_amount: int


class BonusPolicy:
    """Mutable holder for the bonus rate applied to reports."""

    __slots__ = ("_rate",)

    def __init__(self, rate: int) -> None:
        """Create a policy with a validated initial ``rate``."""
        self._rate = validate_bonus_rate(rate)

    @property
    def rate(self) -> int:
        """Return the current bonus percentage."""
        return self._rate

    def update(self, rate: int) -> int:
        """Validate and apply a new rate, returning it."""
        self._rate = validate_bonus_rate(rate)
        return self._rate


def calculate_bonuses(state: AggregateState, rate: int) -> list[BonusLine]:
    """Return bonus lines ordered by total sales, highest first.

    Ties keep the ledger's insertion order.
    """
    validate_bonus_rate(rate)
    lines = [
        BonusLine(
            identifier=identifier,
            display_name=record.display_name,
            sale_count=record.sale_count,
            total_sales=record.total_sales,
            bonus_amount=bonus_for(record.total_sales, rate),
        )
        for identifier, record in state.employees.items()
    ]
    return sorted(lines, key=lambda line: line.total_sales, reverse=True)


@dataclasses.dataclass(frozen=True, slots=True)
class BonusReport:
    """Bonus lines for a period together with the inputs that produced them."""

    period_start: dt.datetime
    generated_at: dt.datetime
    bonus_rate: int
    lines: tuple[BonusLine, ...]

    @property
    def total_sales(self) -> int:
        """Return the grand total of sales."""
        return sum(line.total_sales for line in self.lines)

    @property
    def total_bonus(self) -> int:
        """Return the sum of individual bonuses."""
        return sum(line.bonus_amount for line in self.lines)

    @property
    def top(self) -> BonusLine | None:
        """Return the highest-ranked line, if any."""
        return self.lines[0] if self.lines else None


def build_bonus_report(
    state: AggregateState,
    rate: int,
    *,
    generated_at: dt.datetime,
) -> BonusReport:
    """Calculate bonuses for ``state`` and wrap them in a report."""
    return BonusReport(
        period_start=state.period_start,
        generated_at=generated_at,
        bonus_rate=rate,
        lines=tuple(calculate_bonuses(state, rate)),
    )


__all__ = [
    "MAX_BONUS_RATE",
    "MIN_BONUS_RATE",
    "BonusLine",
    "BonusPolicy",
    "BonusReport",
    "bonus_for",
    "build_bonus_report",
    "calculate_bonuses",
    "validate_bonus_rate",
]
