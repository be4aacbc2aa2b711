"""Whole-state snapshot persistence.

The snapshot is rewritten in full after every ledger mutation. Writes go to a
sibling temporary file that is then renamed over the target, so a crash
mid-write leaves the previous snapshot intact.

Snapshots written by the earlier JavaScript bot (``name``/``sales`` keys and
``weekStartDate``) are still accepted on load and upgraded on the next save.
"""

from __future__ import annotations

import datetime as dt  # noqa: TC003 - msgspec resolves annotations at runtime
import os
import typing as typ

import msgspec

from .errors import SnapshotStoreError
from .models import AggregateState, EmployeeRecord, SaleEvent

if typ.TYPE_CHECKING:
    from pathlib import Path


@typ.runtime_checkable
class SnapshotStore(typ.Protocol):
    """Synchronous whole-state persistence for :class:`AggregateState`."""

    def load(self) -> AggregateState | None:
        """Return the stored state, or ``None`` when nothing is stored."""
        ...

    def save(self, state: AggregateState) -> None:
        """Replace the stored state with ``state``."""
        ...


class _LegacySale(msgspec.Struct, kw_only=True, rename="camel"):
    amount: int
    date: dt.datetime
    message_id: str


class _LegacyEmployee(msgspec.Struct, kw_only=True):
    name: str
    sales: list[_LegacySale] = msgspec.field(default_factory=list)


class _LegacySnapshot(msgspec.Struct, kw_only=True, rename="camel"):
    week_start_date: dt.datetime
    employees: dict[str, _LegacyEmployee] = msgspec.field(default_factory=dict)
    last_update: dt.datetime | None = None

    def upgrade(self) -> AggregateState:
        return AggregateState(
            period_start=self.week_start_date,
            updated_at=self.last_update,
            employees={
                identifier: EmployeeRecord(
                    display_name=legacy.name,
                    sale_events=[
                        SaleEvent(
                            amount=sale.amount,
                            occurred_at=sale.date,
                            source_message_id=sale.message_id,
                        )
                        for sale in legacy.sales
                    ],
                )
                for identifier, legacy in self.employees.items()
            },
        )


def decode_snapshot(raw: bytes) -> AggregateState:
    """Decode snapshot bytes in either the current or the legacy layout."""
    try:
        return msgspec.json.decode(raw, type=AggregateState)
    except msgspec.ValidationError:
        legacy = msgspec.json.decode(raw, type=_LegacySnapshot)
    return legacy.upgrade()


class JsonSnapshotStore:
    """Persist the ledger state as a JSON document on the local filesystem."""

    def __init__(self, path: Path) -> None:
        """Bind the store to the snapshot file path."""
        self._path = path

    @property
    def path(self) -> Path:
        """Return the snapshot file path."""
        return self._path

    def load(self) -> AggregateState | None:
        """Read the snapshot, returning ``None`` when the file is absent.

        Raises
        ------
        SnapshotStoreError
            If the file exists but cannot be read or decoded.

        """
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise SnapshotStoreError.unreadable(self._path, exc) from exc

        try:
            return decode_snapshot(raw)
        except msgspec.DecodeError as exc:
            raise SnapshotStoreError.unreadable(self._path, exc) from exc

    def save(self, state: AggregateState) -> None:
        """Atomically replace the snapshot with ``state``.

        Raises
        ------
        SnapshotStoreError
            If the snapshot cannot be written.

        """
        payload = msgspec.json.format(msgspec.json.encode(state), indent=2)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(payload)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise SnapshotStoreError.write_failed(self._path, exc) from exc


__all__ = ["JsonSnapshotStore", "SnapshotStore", "decode_snapshot"]
