"""Typed ledger state persisted in the weekly snapshot.

Field names are camel-cased on the wire so the snapshot reads::

    {"employees": {"ABC12345": {"displayName": ..., "saleEvents": [...]}},
     "periodStart": ..., "updatedAt": ...}

"""

from __future__ import annotations

import datetime as dt  # noqa: TC003 - msgspec resolves annotations at runtime

import msgspec


class SaleEvent(msgspec.Struct, kw_only=True, rename="camel"):
    """One recorded sale.

    Attributes
    ----------
    amount : int
        Non-negative whole-unit amount.
    occurred_at : datetime
        Timestamp of the source message, not of processing.
    source_message_id : str
        Identifier of the chat message the sale came from. Kept for
        traceability only; it is never used to deduplicate.

    """

    amount: int
    occurred_at: dt.datetime
    source_message_id: str


class EmployeeRecord(msgspec.Struct, kw_only=True, rename="camel"):
    """Accumulated sales and the last seen display name for an employee."""

    display_name: str
    sale_events: list[SaleEvent] = msgspec.field(default_factory=list)

    @property
    def sale_count(self) -> int:
        """Return the number of recorded sales."""
        return len(self.sale_events)

    @property
    def total_sales(self) -> int:
        """Return the sum of recorded sale amounts."""
        return sum(event.amount for event in self.sale_events)


class AggregateState(msgspec.Struct, kw_only=True, rename="camel"):
    """All employee records for the current period."""

    period_start: dt.datetime
    employees: dict[str, EmployeeRecord] = msgspec.field(default_factory=dict)
    updated_at: dt.datetime | None = None

    @classmethod
    def empty(cls, period_start: dt.datetime) -> AggregateState:
        """Return a state with no employees starting at ``period_start``."""
        return cls(period_start=period_start)

    @property
    def total_sales(self) -> int:
        """Return the grand total across employees."""
        return sum(record.total_sales for record in self.employees.values())


def clone_state(state: AggregateState) -> AggregateState:
    """Return a deep copy of ``state`` that shares no mutable members."""
    return msgspec.json.decode(msgspec.json.encode(state), type=AggregateState)


__all__ = ["AggregateState", "EmployeeRecord", "SaleEvent", "clone_state"]
