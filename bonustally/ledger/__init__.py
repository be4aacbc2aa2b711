"""Per-employee sales ledger and its snapshot persistence."""

from __future__ import annotations

from .errors import LedgerError, SnapshotStoreError
from .models import AggregateState, EmployeeRecord, SaleEvent, clone_state
from .service import SalesLedger, normalize_identifier
from .storage import JsonSnapshotStore, SnapshotStore, decode_snapshot

__all__ = [
    "AggregateState",
    "EmployeeRecord",
    "JsonSnapshotStore",
    "LedgerError",
    "SaleEvent",
    "SalesLedger",
    "SnapshotStore",
    "SnapshotStoreError",
    "clone_state",
    "decode_snapshot",
    "normalize_identifier",
]
