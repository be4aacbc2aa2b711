"""Behavioural tests for turning log messages into recorded sales."""

from __future__ import annotations

import asyncio
import typing as typ

from pytest_bdd import given, parsers, scenario, then, when

from bonustally.commands.router import CommandContext
from tests.support.fakes import make_message, sale_line

if typ.TYPE_CHECKING:
    from tests.features.conftest import BotContext

_ADMIN = CommandContext(author_id="1", is_admin=True)


def run_async[T](coro: typ.Coroutine[typ.Any, typ.Any, T]) -> T:
    """Run async coroutines in sync BDD step functions."""
    return asyncio.run(coro)


@scenario("../sales_ingestion.feature", "Sales and names accumulate per employee")
def test_sales_and_names_accumulate() -> None:
    """Behavioural test: sales and name lines build employee records."""


@scenario("../sales_ingestion.feature", "Incomplete and foreign messages are ignored")
def test_incomplete_and_foreign_messages_ignored() -> None:
    """Behavioural test: rejected lines leave the ledger untouched."""


@scenario("../sales_ingestion.feature", "Backfill by count replays recent history")
def test_backfill_by_count() -> None:
    """Behavioural test: backfill replays a bounded window."""


@scenario("../sales_ingestion.feature", "Backfill rejects a count above the limit")
def test_backfill_rejects_large_count() -> None:
    """Behavioural test: out-of-range counts are rejected."""


def _next_id(bot_context: BotContext) -> str:
    message_id = bot_context["next_id"]
    bot_context["next_id"] = message_id + 1
    return str(message_id)


@when(parsers.parse('the log channel receives "{content}"'))
def log_channel_receives(bot_context: BotContext, content: str) -> None:
    """Deliver a human-authored message to the log channel."""
    message = make_message(_next_id(bot_context), content)
    bot_context["processor"].handle_message(message)


@when(parsers.parse('a bot posts "{content}" in the log channel'))
def bot_posts(bot_context: BotContext, content: str) -> None:
    """Deliver a bot-authored message to the log channel."""
    message = make_message(_next_id(bot_context), content, author_is_bot=True)
    bot_context["processor"].handle_message(message)


@then(parsers.parse('employee "{identifier}" is named "{name}"'))
def employee_named(bot_context: BotContext, identifier: str, name: str) -> None:
    """Assert the employee's display name."""
    record = bot_context["ledger"].snapshot().employees[identifier]
    assert record.display_name == name


@given(
    parsers.parse(
        'the log channel history holds {count:d} sales of ${amount:d} for "{identifier}"'
    )
)
def history_holds_sales(
    bot_context: BotContext, count: int, amount: int, identifier: str
) -> None:
    """Seed channel history newest first."""
    bot_context["source"].messages[:] = [
        make_message(str(5000 + count - index), sale_line(identifier, str(amount)))
        for index in range(count)
    ]


@when(parsers.parse("an administrator backfills the last {count:d} messages"))
def admin_backfills(bot_context: BotContext, count: int) -> None:
    """Run a count backfill as an administrator."""
    bot_context["reply"] = run_async(
        bot_context["router"].dispatch(f"!backfill by-count {count}", _ADMIN)
    )


@then(parsers.parse("the backfill reports {fetched:d} read and {sales:d} sales"))
def backfill_reports(bot_context: BotContext, fetched: int, sales: int) -> None:
    """Assert the summary line of the backfill reply."""
    reply = bot_context.get("reply")
    assert reply is not None
    assert reply.ok
    assert f"📥 Leídos: {fetched} | 💰 Ventas: {sales}" in reply.messages[0]
