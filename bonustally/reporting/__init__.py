"""Bonus calculation and report rendering."""

from __future__ import annotations

from .bonus import (
    MAX_BONUS_RATE,
    MIN_BONUS_RATE,
    BonusLine,
    BonusPolicy,
    BonusReport,
    bonus_for,
    build_bonus_report,
    calculate_bonuses,
    validate_bonus_rate,
)
from .errors import BonusRateError, ReportingError
from .markdown import format_local_date, rank_marker, render_bonus_report

__all__ = [
    "MAX_BONUS_RATE",
    "MIN_BONUS_RATE",
    "BonusLine",
    "BonusPolicy",
    "BonusRateError",
    "BonusReport",
    "ReportingError",
    "bonus_for",
    "build_bonus_report",
    "calculate_bonuses",
    "format_local_date",
    "rank_marker",
    "render_bonus_report",
    "validate_bonus_rate",
]
