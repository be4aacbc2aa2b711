"""Bot process: poll Discord channels, apply logs, answer commands.

Everything runs on one asyncio event loop. Ledger mutations are synchronous
calls made from that loop, so they never interleave mid-update even while a
backfill task is waiting on the network.

Run the bot with ``python -m bonustally.runtime`` or ``bonustally run``.
Configuration is described in :mod:`bonustally.config`.
"""

from __future__ import annotations

import asyncio
import os
import typing as typ

from bonustally.commands.router import CommandContext, CommandRouter
from bonustally.common.time import SystemClock
from bonustally.config import BotConfig, ConfigError
from bonustally.discord.client import (
    ChannelHistorySource,
    DiscordConfig,
    DiscordRestClient,
)
from bonustally.discord.errors import DiscordAPIError, DiscordResponseShapeError
from bonustally.discord.polling import ChannelPoller
from bonustally.ingestion.backfill import BackfillDriver
from bonustally.ingestion.processor import LogProcessor
from bonustally.ledger.service import SalesLedger
from bonustally.ledger.storage import JsonSnapshotStore
from bonustally.lifecycle.schedule import WeeklyCloseTrigger
from bonustally.lifecycle.week import WeekLifecycle
from bonustally.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_exception,
    log_info,
    log_warning,
)
from bonustally.reporting.bonus import BonusPolicy

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from bonustally.common.time import Clock
    from bonustally.discord.models import ChatMessage
    from bonustally.ledger.storage import SnapshotStore

logger = get_logger(__name__)

_POLL_ERRORS = (DiscordAPIError, DiscordResponseShapeError)


class BonusBotRuntime:
    """Wire the ledger, processor, commands and weekly close to Discord."""

    def __init__(
        self,
        config: BotConfig,
        client: DiscordRestClient,
        *,
        clock: Clock | None = None,
        store: SnapshotStore | None = None,
    ) -> None:
        """Build all services for ``config`` on top of ``client``."""
        self._config = config
        self._client = client
        resolved_clock = clock or SystemClock()

        self.ledger = SalesLedger.open(
            store or JsonSnapshotStore(config.data_file), clock=resolved_clock
        )
        self.policy = BonusPolicy(config.bonus_percentage)
        self.lifecycle = WeekLifecycle(self.ledger, clock=resolved_clock)
        self.processor = LogProcessor(
            self.ledger, log_channel_id=config.logs_channel_id
        )
        self.router = CommandRouter(
            processor=self.processor,
            lifecycle=self.lifecycle,
            policy=self.policy,
            tz=config.timezone,
            backfill=BackfillDriver(
                ChannelHistorySource(client, config.logs_channel_id), self.processor
            ),
            clock=resolved_clock,
        )
        self.trigger = WeeklyCloseTrigger(
            config.weekly_schedule(), self._on_weekly_close, clock=resolved_clock
        )
        self._log_poller = ChannelPoller(client, config.logs_channel_id)
        self._command_poller = ChannelPoller(client, config.bonus_channel_id)
        self._tasks: set[asyncio.Task[None]] = set()

    async def start(self) -> None:
        """Prime the channel pollers and announce the bot."""
        await self._log_poller.prime()
        await self._command_poller.prime()

        logs_name = await self._client.fetch_channel_name(self._config.logs_channel_id)
        bonus_name = await self._client.fetch_channel_name(
            self._config.bonus_channel_id
        )
        self.router.channel_labels = {
            "Logs": f"#{logs_name}" if logs_name else "❌",
            "Bonos": f"#{bonus_name}" if bonus_name else "❌",
        }
        log_info(
            logger,
            "Bot ready: logs=%s bonus=%s rate=%d%% close=%s",
            self.router.channel_labels["Logs"],
            self.router.channel_labels["Bonos"],
            self.policy.rate,
            self._config.close_schedule,
        )
        await self.post(
            "🤖 **Bot Online**: monitoreando logs y calculando bonos\n"
            f"📺 Logs: <#{self._config.logs_channel_id}> | "
            f"📊 Bono: {self.policy.rate}% | ⏰ Cierre: {self._config.close_schedule}\n"
            "Usa `!help` para ver comandos"
        )

    async def tick(self) -> None:
        """Run one polling round: logs, then commands, then the close check."""
        for message in await self._poll(self._log_poller):
            self.processor.handle_message(message)
        for message in await self._poll(self._command_poller):
            if not message.author_is_bot:
                self._spawn(self._run_command(message))
        self.trigger.check()

    async def run_forever(self) -> None:
        """Start, then poll until cancelled."""
        await self.start()
        while True:
            await self.tick()
            await asyncio.sleep(self._config.poll_interval_s)

    async def drain(self) -> None:
        """Wait for in-flight command tasks to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def post(self, text: str) -> None:
        """Send ``text`` to the bonus channel, logging delivery failures."""
        try:
            await self._client.send_message(self._config.bonus_channel_id, text)
        except _POLL_ERRORS as exc:
            log_error(logger, "Failed to post to bonus channel: %s", exc, exc_info=exc)

    async def _poll(self, poller: ChannelPoller) -> list[ChatMessage]:
        try:
            return await poller.poll()
        except _POLL_ERRORS as exc:
            log_warning(
                logger,
                "Polling channel %s failed: %s",
                poller.channel_id,
                exc,
                exc_info=exc,
            )
            return []

    async def _run_command(self, message: ChatMessage) -> None:
        context = CommandContext(
            author_id=message.author_id,
            is_admin=message.author_id in self._config.admin_ids,
            channel_id=message.channel_id,
            notify=self.post,
        )
        try:
            reply = await self.router.dispatch(message.content, context)
        except Exception as exc:  # noqa: BLE001 - a failing command must not stop polling
            log_exception(logger, f"Command {message.content!r} failed", exc)
            return
        if reply is None:
            return
        for text in reply.messages:
            await self.post(text)

    def _on_weekly_close(self, fired_at: dt.datetime) -> None:
        log_info(logger, "Automatic weekly close at %s", fired_at.isoformat())
        report = self.router.close_week()

        async def _announce() -> None:
            await self.post(report)
            await self.post("✅ Semana cerrada automáticamente.")

        self._spawn(_announce())

    def _spawn(self, coro: cabc.Coroutine[typ.Any, typ.Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


async def serve(config: BotConfig) -> None:
    """Run the bot for ``config`` until cancelled."""
    client = DiscordRestClient(
        DiscordConfig(token=config.discord_token, api_base=config.api_base)
    )
    runtime = BonusBotRuntime(config, client)
    try:
        await runtime.run_forever()
    finally:
        await runtime.drain()
        await client.aclose()


def main() -> None:
    """Configure logging, load configuration and run the bot.

    Raises
    ------
    SystemExit
        With status 1 when required configuration is missing or invalid.

    """
    log_level_str = os.environ.get("BONUSTALLY_LOG_LEVEL", "INFO")
    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid BONUSTALLY_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    try:
        config = BotConfig.from_env()
    except ConfigError as exc:
        log_error(logger, "Configuration error: %s", exc)
        raise SystemExit(1) from exc

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        log_info(logger, "Shutting down")


if __name__ == "__main__":
    main()
