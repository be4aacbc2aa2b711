"""Ledger and snapshot errors."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


class LedgerError(ValueError):
    """Raised when a ledger mutation receives invalid input."""

    @classmethod
    def invalid_identifier(cls, identifier: str) -> LedgerError:
        """Return an error for identifiers outside the LLLDDDDD format."""
        return cls(f"employee identifier must be 3 letters + 5 digits: {identifier!r}")

    @classmethod
    def negative_amount(cls, amount: int) -> LedgerError:
        """Return an error for negative sale amounts."""
        return cls(f"sale amount must be non-negative, got {amount}")

    @classmethod
    def empty_name(cls, identifier: str) -> LedgerError:
        """Return an error for blank display names."""
        return cls(f"display name for {identifier} must be non-empty")


class SnapshotStoreError(RuntimeError):
    """Raised when the snapshot cannot be read or written."""

    def __init__(self, message: str, *, path: Path) -> None:
        """Initialise with a message and the snapshot path involved."""
        self.path = path
        super().__init__(message)

    @classmethod
    def unreadable(cls, path: Path, reason: object) -> SnapshotStoreError:
        """Return an error for snapshots that fail to load or decode."""
        return cls(f"cannot load snapshot {path}: {reason}", path=path)

    @classmethod
    def write_failed(cls, path: Path, reason: object) -> SnapshotStoreError:
        """Return an error for snapshot writes that fail."""
        return cls(f"cannot write snapshot {path}: {reason}", path=path)
