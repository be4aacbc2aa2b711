"""Unit tests for the polling bot runtime."""

from __future__ import annotations

import dataclasses
import typing as typ
from zoneinfo import ZoneInfo

import pytest

from bonustally.config import BotConfig
from bonustally.runtime import BonusBotRuntime, main
from tests.support.discord_api import FakeDiscordApi
from tests.support.fakes import (
    BONUS_CHANNEL,
    LOGS_CHANNEL,
    FrozenClock,
    MemorySnapshotStore,
    sale_line,
)

if typ.TYPE_CHECKING:
    import datetime as dt

ADMIN_ID = "7"


@dataclasses.dataclass
class RuntimeHarness:
    """A runtime bound to a fake Discord API."""

    api: FakeDiscordApi
    runtime: BonusBotRuntime
    clock: FrozenClock

    def bonus_posts(self) -> list[str]:
        """Return messages the bot posted to the bonus channel."""
        return self.api.posted.get(BONUS_CHANNEL, [])


@pytest.fixture
def harness() -> RuntimeHarness:
    """Build a runtime with a seeded log channel."""
    api = FakeDiscordApi(channel_names={LOGS_CHANNEL: "logs", BONUS_CHANNEL: "bonos"})
    api.add_message(LOGS_CHANNEL, sale_line("OLD00001", "999"))
    config = BotConfig(
        discord_token="test-token",
        logs_channel_id=LOGS_CHANNEL,
        bonus_channel_id=BONUS_CHANNEL,
        timezone=ZoneInfo("America/Argentina/Buenos_Aires"),
        admin_ids=frozenset({ADMIN_ID}),
    )
    clock = FrozenClock()
    runtime = BonusBotRuntime(
        config, api.client(), clock=clock, store=MemorySnapshotStore()
    )
    return RuntimeHarness(api=api, runtime=runtime, clock=clock)


@pytest.mark.asyncio
async def test_start_announces_and_skips_old_history(harness: RuntimeHarness) -> None:
    """Startup posts an announcement and ignores pre-existing logs."""
    await harness.runtime.start()
    await harness.runtime.tick()

    assert harness.bonus_posts()[0].startswith("🤖 **Bot Online**")
    assert harness.runtime.router.channel_labels == {"Logs": "#logs", "Bonos": "#bonos"}
    assert harness.runtime.ledger.employee_count == 0


@pytest.mark.asyncio
async def test_tick_applies_new_logs(harness: RuntimeHarness) -> None:
    """Human log messages posted after startup are recorded."""
    await harness.runtime.start()
    harness.api.add_message(LOGS_CHANNEL, sale_line("ABC12345", "1,500"))
    harness.api.add_message(LOGS_CHANNEL, sale_line("ABC12345", "500"), bot=True)

    await harness.runtime.tick()

    assert harness.runtime.ledger.total_for("ABC12345") == 1500


@pytest.mark.asyncio
async def test_commands_are_answered(harness: RuntimeHarness) -> None:
    """Commands in the bonus channel get replies there."""
    await harness.runtime.start()
    harness.api.add_message(LOGS_CHANNEL, sale_line("ABC12345", "1,000"))
    harness.api.add_message(BONUS_CHANNEL, "!report", author_id=ADMIN_ID)

    await harness.runtime.tick()
    await harness.runtime.drain()

    report = harness.bonus_posts()[-1]
    assert report.startswith("# 📊 REPORTE SEMANAL DE BONOS")
    assert "Bono: $200" in report


@pytest.mark.asyncio
async def test_admin_close_uses_configured_ids(harness: RuntimeHarness) -> None:
    """Only configured admin ids may close the week."""
    await harness.runtime.start()
    harness.api.add_message(LOGS_CHANNEL, sale_line("ABC12345", "1,000"))
    harness.api.add_message(BONUS_CHANNEL, "!close", author_id="99")
    await harness.runtime.tick()
    await harness.runtime.drain()

    assert harness.bonus_posts()[-1] == "❌ Solo administradores pueden usar !close."
    assert harness.runtime.ledger.employee_count == 1

    harness.api.add_message(BONUS_CHANNEL, "!close", author_id=ADMIN_ID)
    await harness.runtime.tick()
    await harness.runtime.drain()

    assert harness.bonus_posts()[-1] == "✅ Semana cerrada. Datos reseteados."
    assert harness.runtime.ledger.employee_count == 0


@pytest.mark.asyncio
async def test_weekly_close_fires_from_tick(harness: RuntimeHarness) -> None:
    """Reaching the close minute posts the report and resets the ledger."""
    await harness.runtime.start()
    harness.api.add_message(LOGS_CHANNEL, sale_line("ABC12345", "1,000"))
    await harness.runtime.tick()

    sunday_close: dt.datetime = harness.clock.now().replace(day=12, hour=2)
    harness.clock.set(sunday_close)
    await harness.runtime.tick()
    await harness.runtime.drain()

    posts = harness.bonus_posts()
    assert "Bono: $200" in posts[-2]
    assert posts[-1] == "✅ Semana cerrada automáticamente."
    assert harness.runtime.ledger.employee_count == 0
    assert harness.runtime.ledger.period_start == sunday_close


def test_main_exits_on_missing_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Missing required configuration stops the process with status 1."""
    for name in ("DISCORD_TOKEN", "LOGS_CHANNEL_ID", "BONUS_CHANNEL_ID"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        "bonustally.runtime.configure_logging", lambda _level: ("INFO", False)
    )

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 1
