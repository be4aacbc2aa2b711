"""The sales ledger: sole owner and writer of the aggregate state.

Every mutation is followed by a synchronous snapshot write. A failed write
is logged and otherwise ignored; the in-memory state remains the source of
truth and keeps accepting events.

Recording is not idempotent. Feeding the same source message twice records
two sales, so replaying history that overlaps live processing double counts.
"""

from __future__ import annotations

import re
import typing as typ

from bonustally.common.time import SystemClock, ensure_aware
from bonustally.logging import get_logger, log_error, log_info

from .errors import LedgerError, SnapshotStoreError
from .models import AggregateState, EmployeeRecord, SaleEvent, clone_state

if typ.TYPE_CHECKING:
    import datetime as dt

    from bonustally.common.time import Clock

    from .storage import SnapshotStore

logger = get_logger(__name__)

_IDENTIFIER_RE = re.compile(r"[A-Z]{3}\d{5}")


def normalize_identifier(identifier: str) -> str:
    """Strip whitespace and upper-case an identifier, validating its format."""
    normalized = "".join(identifier.split()).upper()
    if not _IDENTIFIER_RE.fullmatch(normalized):
        raise LedgerError.invalid_identifier(identifier)
    return normalized


class SalesLedger:
    """Accumulate per-employee sales for the current period."""

    def __init__(
        self,
        state: AggregateState | None = None,
        *,
        store: SnapshotStore | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Create a ledger over ``state`` (empty when omitted)."""
        self._clock = clock or SystemClock()
        self._store = store
        self._state = (
            state if state is not None else AggregateState.empty(self._clock.now())
        )

    @classmethod
    def open(cls, store: SnapshotStore, *, clock: Clock | None = None) -> SalesLedger:
        """Load the ledger from ``store``, starting empty if nothing loads."""
        try:
            state = store.load()
        except SnapshotStoreError as exc:
            log_error(
                logger,
                "Snapshot unreadable, starting an empty period: %s",
                exc,
                exc_info=exc,
            )
            state = None
        if state is not None:
            log_info(logger, "Loaded snapshot with %d employee(s)", len(state.employees))
        return cls(state, store=store, clock=clock)

    @property
    def period_start(self) -> dt.datetime:
        """Return the start of the current accrual period."""
        return self._state.period_start

    @property
    def employee_count(self) -> int:
        """Return the number of tracked employees."""
        return len(self._state.employees)

    @property
    def total_sales(self) -> int:
        """Return the grand total for the period."""
        return self._state.total_sales

    def total_for(self, identifier: str) -> int:
        """Return the period total for one employee, 0 when unknown."""
        record = self._state.employees.get(normalize_identifier(identifier))
        return record.total_sales if record is not None else 0

    def snapshot(self) -> AggregateState:
        """Return a detached copy of the current state."""
        return clone_state(self._state)

    def record_sale(
        self,
        identifier: str,
        amount: int,
        occurred_at: dt.datetime,
        source_message_id: str,
    ) -> SaleEvent:
        """Append a sale for ``identifier``, creating the employee if needed."""
        key = normalize_identifier(identifier)
        if amount < 0:
            raise LedgerError.negative_amount(amount)

        record = self._state.employees.get(key)
        if record is None:
            record = EmployeeRecord(display_name=key)
            self._state.employees[key] = record

        event = SaleEvent(
            amount=amount,
            occurred_at=ensure_aware(occurred_at),
            source_message_id=source_message_id,
        )
        record.sale_events.append(event)
        self._persist()
        return event

    def update_name(self, identifier: str, name: str) -> EmployeeRecord:
        """Set the display name for ``identifier``; last write wins."""
        key = normalize_identifier(identifier)
        display_name = name.strip()
        if not display_name:
            raise LedgerError.empty_name(key)

        record = self._state.employees.get(key)
        if record is None:
            record = EmployeeRecord(display_name=display_name)
            self._state.employees[key] = record
        else:
            record.display_name = display_name
        self._persist()
        return record

    def reset(self, period_start: dt.datetime) -> AggregateState:
        """Discard all records and start a new period.

        Returns the state as it was immediately before the reset.
        """
        previous = self._state
        self._state = AggregateState.empty(ensure_aware(period_start))
        self._persist()
        return previous

    def _persist(self) -> None:
        self._state.updated_at = self._clock.now()
        if self._store is None:
            return
        try:
            self._store.save(self._state)
        except SnapshotStoreError as exc:
            log_error(
                logger,
                "[snapshot.save.failed] path=%s error=%s",
                exc.path,
                exc,
                exc_info=exc,
            )


__all__ = ["SalesLedger", "normalize_identifier"]
