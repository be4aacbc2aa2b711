"""Structured log events for log-line ingestion and backfill runs.

Events are single log lines shaped ``[event.type] key=value ...`` so they
can be grepped or parsed by a log aggregator.
"""

from __future__ import annotations

import enum
import typing as typ

from bonustally.discord.errors import DiscordAPIError, DiscordResponseShapeError
from bonustally.ledger.errors import LedgerError, SnapshotStoreError
from bonustally.logging import get_logger, log_debug, log_error, log_info

if typ.TYPE_CHECKING:
    import datetime as dt

    from bonustally.discord.models import ChatMessage
    from bonustally.parsing.classify import ClassifiedLine

    from .backfill import BackfillRequest, BackfillResult

logger = get_logger(__name__)

# Discord signals rate limiting with 429; 5xx are server side.
_HTTP_TOO_MANY_REQUESTS = 429
_HTTP_SERVER_ERROR_THRESHOLD = 500


class IngestionEventType(enum.StrEnum):
    """Structured log event types."""

    SALE_RECORDED = "ingestion.sale.recorded"
    NAME_UPDATED = "ingestion.name.updated"
    LINE_IGNORED = "ingestion.line.ignored"
    MESSAGE_FAILED = "ingestion.message.failed"
    BACKFILL_STARTED = "backfill.started"
    BACKFILL_COMPLETED = "backfill.completed"
    BACKFILL_FAILED = "backfill.failed"


class ErrorCategory(enum.StrEnum):
    """Categories for failure classification in alerts."""

    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    INVALID_DATA = "invalid_data"
    STORAGE = "storage"
    UNKNOWN = "unknown"


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (DiscordResponseShapeError, ErrorCategory.SCHEMA_DRIFT),
    (LedgerError, ErrorCategory.INVALID_DATA),
    (SnapshotStoreError, ErrorCategory.STORAGE),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting purposes."""
    if isinstance(exc, DiscordAPIError):
        status = exc.status_code
        if (
            status is None
            or status == _HTTP_TOO_MANY_REQUESTS
            or status >= _HTTP_SERVER_ERROR_THRESHOLD
        ):
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category
    return ErrorCategory.UNKNOWN


class IngestionEventLogger:
    """Emit structured ingestion and backfill events."""

    def log_sale_recorded(
        self, message: ChatMessage, line: ClassifiedLine, total_sales: int
    ) -> None:
        """Log an accepted sale with the employee's new total."""
        log_info(
            logger,
            "[%s] message_id=%s identifier=%s amount=%d total_sales=%d",
            IngestionEventType.SALE_RECORDED,
            message.id,
            line.identifier,
            line.amount,
            total_sales,
        )

    def log_name_updated(self, message: ChatMessage, line: ClassifiedLine) -> None:
        """Log a display-name update."""
        log_info(
            logger,
            "[%s] message_id=%s identifier=%s name=%s",
            IngestionEventType.NAME_UPDATED,
            message.id,
            line.identifier,
            line.name,
        )

    def log_line_ignored(self, message: ChatMessage, line: ClassifiedLine) -> None:
        """Trace a line that produced no ledger change."""
        log_debug(
            logger,
            "[%s] message_id=%s kind=%s identifier=%s amount=%d",
            IngestionEventType.LINE_IGNORED,
            message.id,
            line.kind,
            line.identifier,
            line.amount,
        )

    def log_message_failed(self, message: ChatMessage, error: BaseException) -> None:
        """Log a message whose processing raised."""
        log_error(
            logger,
            "[%s] message_id=%s error_type=%s error_category=%s error_message=%s",
            IngestionEventType.MESSAGE_FAILED,
            message.id,
            type(error).__name__,
            categorize_error(error),
            error,
            exc_info=error,
        )

    def log_backfill_started(self, request: BackfillRequest) -> None:
        """Log the start of a backfill run."""
        log_info(
            logger,
            "[%s] cutoff=%s limit=%s",
            IngestionEventType.BACKFILL_STARTED,
            request.cutoff.isoformat() if request.cutoff else None,
            request.limit,
        )

    def log_backfill_completed(
        self, result: BackfillResult, duration: dt.timedelta
    ) -> None:
        """Log a completed backfill run with its counts."""
        log_info(
            logger,
            "[%s] duration_seconds=%.3f fetched=%d sales=%d employees=%d",
            IngestionEventType.BACKFILL_COMPLETED,
            duration.total_seconds(),
            result.fetched,
            result.sales,
            result.employees,
        )

    def log_backfill_failed(
        self, error: BaseException, duration: dt.timedelta
    ) -> None:
        """Log a backfill run that failed while fetching history."""
        log_error(
            logger,
            "[%s] duration_seconds=%.3f error_type=%s error_category=%s "
            "error_message=%s",
            IngestionEventType.BACKFILL_FAILED,
            duration.total_seconds(),
            type(error).__name__,
            categorize_error(error),
            error,
            exc_info=error,
        )
