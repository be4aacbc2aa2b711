"""Shared fixtures and steps for bonus bot feature tests."""

from __future__ import annotations

import typing as typ

import pytest
from pytest_bdd import given, parsers, then

from bonustally.commands.router import CommandRouter
from bonustally.ingestion.backfill import BackfillDriver
from bonustally.lifecycle.week import WeekLifecycle
from bonustally.reporting.bonus import BonusPolicy
from tests.support.fakes import FakeHistorySource

if typ.TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from bonustally.commands.router import CommandReply
    from bonustally.ingestion.processor import LogProcessor
    from bonustally.ledger.service import SalesLedger
    from bonustally.reporting.bonus import BonusReport
    from tests.support.fakes import FrozenClock


class BotContext(typ.TypedDict, total=False):
    """Shared mutable scenario state."""

    ledger: SalesLedger
    processor: LogProcessor
    lifecycle: WeekLifecycle
    policy: BonusPolicy
    source: FakeHistorySource
    router: CommandRouter
    clock: FrozenClock
    tz: ZoneInfo
    reply: CommandReply | None
    close_reports: list[BonusReport]
    next_id: int


@pytest.fixture
def bot_context(
    ledger: SalesLedger,
    processor: LogProcessor,
    clock: FrozenClock,
    local_tz: ZoneInfo,
) -> BotContext:
    """Wire in-memory services the way the runtime does."""
    policy = BonusPolicy(20)
    source = FakeHistorySource([])
    lifecycle = WeekLifecycle(ledger, clock=clock)
    router = CommandRouter(
        processor=processor,
        lifecycle=lifecycle,
        policy=policy,
        tz=local_tz,
        backfill=BackfillDriver(source, processor),
        clock=clock,
    )
    return {
        "ledger": ledger,
        "processor": processor,
        "lifecycle": lifecycle,
        "policy": policy,
        "source": source,
        "router": router,
        "clock": clock,
        "tz": local_tz,
        "next_id": 1,
    }


@given("an empty sales ledger")
def empty_ledger(bot_context: BotContext) -> None:
    """Start from a ledger with no employees."""
    assert bot_context["ledger"].employee_count == 0


@then("the ledger has no employees")
def ledger_is_empty(bot_context: BotContext) -> None:
    """Assert nothing is recorded."""
    assert bot_context["ledger"].employee_count == 0


@then(
    parsers.parse(
        'employee "{identifier}" has {count:d} sale(s) totalling {total:d}'
    )
)
def employee_totals(
    bot_context: BotContext, identifier: str, count: int, total: int
) -> None:
    """Assert an employee's sale count and total."""
    record = bot_context["ledger"].snapshot().employees[identifier]
    assert record.sale_count == count
    assert record.total_sales == total


@then(parsers.parse('the reply is rejected mentioning "{fragment}"'))
def reply_rejected(bot_context: BotContext, fragment: str) -> None:
    """Assert the last command was rejected with ``fragment`` in the text."""
    reply = bot_context.get("reply")
    assert reply is not None
    assert not reply.ok
    assert fragment in reply.messages[0]
