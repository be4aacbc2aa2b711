"""Errors specific to bonus reporting."""

from __future__ import annotations


class ReportingError(Exception):
    """Base class for reporting errors."""


class BonusRateError(ReportingError, ValueError):
    """Raised when a bonus rate falls outside 0–100."""

    def __init__(self, rate: object) -> None:
        """Initialise with the rejected rate."""
        self.rate = rate
        super().__init__(f"bonus rate must be an integer between 0 and 100, got {rate!r}")
