"""Replay a bounded window of channel history through the live pipeline.

History is fetched newest first, page by page, until the message count is
reached, a message older than the cutoff appears, or the source runs dry.
The collected messages are then applied oldest first, exactly as live
messages would have been.

Replaying messages the ledger already holds records them again; backfill
does not deduplicate against earlier runs or live processing.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import typing as typ

from bonustally.common.time import ensure_aware, utcnow

from .observability import IngestionEventLogger

if typ.TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from bonustally.discord.models import ChatMessage

    from .processor import LogProcessor

MIN_BACKFILL_COUNT = 1
MAX_BACKFILL_COUNT = 1000
DEFAULT_PAGE_SIZE = 100

_DATE_FORMATS: tuple[str, ...] = ("%d/%m/%Y", "%Y-%m-%d")


class BackfillValidationError(ValueError):
    """Raised when a backfill request is malformed."""

    @classmethod
    def count_out_of_range(cls, value: object) -> BackfillValidationError:
        """Return an error for counts outside 1–1000."""
        return cls(
            f"message count must be an integer between {MIN_BACKFILL_COUNT} "
            f"and {MAX_BACKFILL_COUNT}, got {value!r}"
        )

    @classmethod
    def invalid_date(cls, value: str) -> BackfillValidationError:
        """Return an error for dates that are not DD/MM/YYYY."""
        return cls(f"date must use the DD/MM/YYYY format, got {value!r}")

    @classmethod
    def ambiguous(cls) -> BackfillValidationError:
        """Return an error when both or neither bound is given."""
        return cls("backfill needs exactly one of a cutoff date or a message count")


class HistorySource(typ.Protocol):
    """Paginated message history, newest first."""

    @property
    def max_page_size(self) -> int:
        """Return the largest page the source serves."""
        ...

    async def fetch_page(
        self, *, before: str | None = None, limit: int = DEFAULT_PAGE_SIZE
    ) -> list[ChatMessage]:
        """Return up to ``limit`` messages older than ``before``.

        An empty list signals the end of history.
        """
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class BackfillRequest:
    """Bounds for one backfill run: a cutoff timestamp or a message count."""

    cutoff: dt.datetime | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        """Require exactly one bound, with the count in range."""
        if (self.cutoff is None) == (self.limit is None):
            raise BackfillValidationError.ambiguous()
        if self.limit is not None and not (
            MIN_BACKFILL_COUNT <= self.limit <= MAX_BACKFILL_COUNT
        ):
            raise BackfillValidationError.count_out_of_range(self.limit)

    @classmethod
    def by_count(cls, raw: int | str) -> BackfillRequest:
        """Build a request for the newest ``raw`` messages."""
        try:
            count = int(raw)
        except (TypeError, ValueError) as exc:
            raise BackfillValidationError.count_out_of_range(raw) from exc
        return cls(limit=count)

    @classmethod
    def by_date(cls, raw: str, tz: ZoneInfo) -> BackfillRequest:
        """Build a request for messages since local midnight of ``raw``."""
        value = raw.strip()
        for fmt in _DATE_FORMATS:
            try:
                day = dt.datetime.strptime(value, fmt)  # noqa: DTZ007 - zone applied below
            except ValueError:
                continue
            return cls(cutoff=day.replace(tzinfo=tz))
        raise BackfillValidationError.invalid_date(raw)


@dataclasses.dataclass(frozen=True, slots=True)
class BackfillResult:
    """Counts reported back after a backfill run."""

    fetched: int
    sales: int
    employees: int
    total_sales: int


class BackfillDriver:
    """Fetch channel history and feed it through a :class:`LogProcessor`."""

    def __init__(
        self,
        source: HistorySource,
        processor: LogProcessor,
        *,
        event_logger: IngestionEventLogger | None = None,
    ) -> None:
        """Bind the driver to a history source and processor."""
        self._source = source
        self._processor = processor
        self._event_logger = event_logger or IngestionEventLogger()

    async def run(self, request: BackfillRequest) -> BackfillResult:
        """Collect history for ``request`` and apply it oldest first."""
        started_at = utcnow()
        self._event_logger.log_backfill_started(request)
        try:
            collected = await self.collect(request)
        except Exception as exc:
            self._event_logger.log_backfill_failed(exc, utcnow() - started_at)
            raise

        sales = sum(
            1 for message in reversed(collected) if self._processor.process_safely(message)
        )
        ledger = self._processor.ledger
        result = BackfillResult(
            fetched=len(collected),
            sales=sales,
            employees=ledger.employee_count,
            total_sales=ledger.total_sales,
        )
        self._event_logger.log_backfill_completed(result, utcnow() - started_at)
        return result

    async def collect(self, request: BackfillRequest) -> list[ChatMessage]:
        """Return the messages inside ``request``'s bounds, newest first."""
        cutoff = ensure_aware(request.cutoff) if request.cutoff else None
        page_size = max(1, self._source.max_page_size)
        collected: list[ChatMessage] = []
        before: str | None = None

        while True:
            page_limit = page_size
            if request.limit is not None:
                page_limit = min(page_size, request.limit - len(collected))

            page = await self._source.fetch_page(before=before, limit=page_limit)
            if not page:
                break

            crossed_cutoff = False
            for message in page:
                if cutoff is not None and ensure_aware(message.created_at) < cutoff:
                    crossed_cutoff = True
                    break
                collected.append(message)
                if request.limit is not None and len(collected) >= request.limit:
                    break

            if crossed_cutoff or self._limit_reached(request, collected):
                break
            if len(page) < page_limit:
                break
            before = page[-1].id

        return collected

    @staticmethod
    def _limit_reached(request: BackfillRequest, collected: list[ChatMessage]) -> bool:
        return request.limit is not None and len(collected) >= request.limit


__all__ = [
    "MAX_BACKFILL_COUNT",
    "MIN_BACKFILL_COUNT",
    "BackfillDriver",
    "BackfillRequest",
    "BackfillResult",
    "BackfillValidationError",
    "HistorySource",
]
