"""Live log processing and historical backfill."""

from __future__ import annotations

from .backfill import (
    MAX_BACKFILL_COUNT,
    MIN_BACKFILL_COUNT,
    BackfillDriver,
    BackfillRequest,
    BackfillResult,
    BackfillValidationError,
    HistorySource,
)
from .observability import (
    ErrorCategory,
    IngestionEventLogger,
    IngestionEventType,
    categorize_error,
)
from .processor import LogProcessor

__all__ = [
    "MAX_BACKFILL_COUNT",
    "MIN_BACKFILL_COUNT",
    "BackfillDriver",
    "BackfillRequest",
    "BackfillResult",
    "BackfillValidationError",
    "ErrorCategory",
    "HistorySource",
    "IngestionEventLogger",
    "IngestionEventType",
    "LogProcessor",
    "categorize_error",
]
