"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest

from bonustally.ingestion.processor import LogProcessor
from bonustally.ledger.service import SalesLedger
from tests.support.fakes import LOGS_CHANNEL, FrozenClock, MemorySnapshotStore

LOCAL_TZ = ZoneInfo("America/Argentina/Buenos_Aires")


@pytest.fixture
def clock() -> FrozenClock:
    """Provide a clock frozen at the shared base time."""
    return FrozenClock()


@pytest.fixture
def store() -> MemorySnapshotStore:
    """Provide an empty in-memory snapshot store."""
    return MemorySnapshotStore()


@pytest.fixture
def ledger(clock: FrozenClock, store: MemorySnapshotStore) -> SalesLedger:
    """Provide an empty ledger persisting to the in-memory store."""
    return SalesLedger(store=store, clock=clock)


@pytest.fixture
def processor(ledger: SalesLedger) -> LogProcessor:
    """Provide a processor bound to the logs channel."""
    return LogProcessor(ledger, log_channel_id=LOGS_CHANNEL)


@pytest.fixture
def local_tz() -> ZoneInfo:
    """Provide the default local zone."""
    return LOCAL_TZ
