"""Chat command surface for the bonus channel.

Commands start with ``!`` and are reserved for administrators. English names
are canonical; the Spanish names used by operators of the original bot are
accepted as aliases:

========================  ==========================
Command                   Aliases
========================  ==========================
``report``                ``reporte``
``status``                ``test``, ``ping``
``help``                  ``ayuda``
``test-log <text>``       ``testlog``
``close``                 ``cerrar``
``set-bonus-rate <n>``    ``porcentaje``
``backfill by-date <d>``  ``leer fecha <d>``
``backfill by-count <n>`` ``leer cantidad <n>``
========================  ==========================

Validation and permission failures become a rejection reply and never
change state.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import typing as typ

from bonustally.common.money import format_money
from bonustally.common.time import SystemClock
from bonustally.discord.models import ChatMessage
from bonustally.ingestion.backfill import BackfillRequest, BackfillValidationError
from bonustally.logging import get_logger, log_exception, log_info
from bonustally.reporting.bonus import build_bonus_report
from bonustally.reporting.errors import BonusRateError
from bonustally.reporting.markdown import format_local_date, render_bonus_report

from .errors import CommandError, CommandValidationError, PermissionDeniedError

if typ.TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from bonustally.common.time import Clock
    from bonustally.ingestion.backfill import BackfillDriver
    from bonustally.ingestion.processor import LogProcessor
    from bonustally.lifecycle.week import WeekLifecycle
    from bonustally.reporting.bonus import BonusPolicy

    type Notifier = cabc.Callable[[str], cabc.Awaitable[None]]
    type Handler = cabc.Callable[
        [CommandContext, list[str]], cabc.Awaitable[CommandReply]
    ]

logger = get_logger(__name__)

COMMAND_PREFIX = "!"

_ALIASES: dict[str, str] = {
    "reporte": "report",
    "test": "status",
    "ping": "status",
    "ayuda": "help",
    "testlog": "test-log",
    "cerrar": "close",
    "porcentaje": "set-bonus-rate",
    "leer": "backfill",
}
_BACKFILL_DATE_MODES = frozenset({"by-date", "fecha"})
_BACKFILL_COUNT_MODES = frozenset({"by-count", "cantidad"})

_HELP_LINES: tuple[tuple[str, str], ...] = (
    ("!status", "Estado del bot"),
    ("!test-log <texto>", "Probar procesamiento"),
    ("!report", "Ver reporte actual"),
    ("!backfill by-date DD/MM/YYYY", "Leer logs desde fecha"),
    ("!backfill by-count N", "Leer últimos N mensajes"),
    ("!close", "Cerrar semana"),
    ("!set-bonus-rate N", "Cambiar % bono"),
    ("!help", "Este mensaje"),
)


@dataclasses.dataclass(frozen=True, slots=True)
class CommandContext:
    """Who invoked a command and how to send interim updates."""

    author_id: str
    is_admin: bool
    channel_id: str = ""
    notify: Notifier | None = None

    async def send(self, text: str) -> None:
        """Send an interim message when a notifier is attached."""
        if self.notify is not None:
            await self.notify(text)


@dataclasses.dataclass(frozen=True, slots=True)
class CommandReply:
    """Messages to post in response to a command."""

    messages: tuple[str, ...]
    ok: bool = True

    @classmethod
    def text(cls, *messages: str) -> CommandReply:
        """Return a successful reply."""
        return cls(messages=messages)

    @classmethod
    def rejected(cls, message: str) -> CommandReply:
        """Return a rejection reply."""
        return cls(messages=(f"❌ {message}",), ok=False)


def parse_command(content: str) -> tuple[str, list[str]] | None:
    """Split ``!name arg ...`` into a canonical name and arguments."""
    if not content.startswith(COMMAND_PREFIX):
        return None
    parts = content[len(COMMAND_PREFIX) :].split()
    if not parts:
        return None
    name = parts[0].lower()
    return (_ALIASES.get(name, name), parts[1:])


class CommandRouter:
    """Dispatch bonus-channel commands to the ledger and lifecycle."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        processor: LogProcessor,
        lifecycle: WeekLifecycle,
        policy: BonusPolicy,
        tz: ZoneInfo,
        backfill: BackfillDriver | None = None,
        clock: Clock | None = None,
        channel_labels: cabc.Mapping[str, str] | None = None,
    ) -> None:
        """Wire the router to the services commands act on."""
        self._processor = processor
        self._lifecycle = lifecycle
        self._policy = policy
        self._tz = tz
        self._backfill = backfill
        self._clock = clock or SystemClock()
        self.channel_labels: dict[str, str] = dict(channel_labels or {})
        self._handlers: dict[str, Handler] = {
            "report": self._report,
            "status": self._status,
            "help": self._help,
            "test-log": self._test_log,
            "close": self._close,
            "set-bonus-rate": self._set_bonus_rate,
            "backfill": self._run_backfill,
        }

    @property
    def commands(self) -> frozenset[str]:
        """Return the canonical command names."""
        return frozenset(self._handlers)

    async def dispatch(self, content: str, context: CommandContext) -> CommandReply | None:
        """Run the command in ``content``; ``None`` if it is not a command."""
        parsed = parse_command(content)
        if parsed is None:
            return None
        name, args = parsed
        handler = self._handlers.get(name)
        if handler is None:
            return None

        try:
            if not context.is_admin:
                raise PermissionDeniedError(name)
            return await handler(context, args)
        except PermissionDeniedError as exc:
            log_info(
                logger, "Denied !%s for non-admin %s", exc.command, context.author_id
            )
            return CommandReply.rejected(f"Solo administradores pueden usar !{exc.command}.")
        except (CommandError, BackfillValidationError, BonusRateError) as exc:
            return CommandReply.rejected(str(exc))

    def render_report(self) -> str:
        """Render the current period's bonus report."""
        report = build_bonus_report(
            self._processor.ledger.snapshot(),
            self._policy.rate,
            generated_at=self._clock.now(),
        )
        return render_bonus_report(report, tz=self._tz)

    def close_week(self) -> str:
        """Render the closing report and reset the period."""
        report = self._lifecycle.close_week(self._policy.rate)
        return render_bonus_report(report, tz=self._tz)

    async def _report(self, context: CommandContext, args: list[str]) -> CommandReply:
        del context, args
        return CommandReply.text(self.render_report())

    async def _status(self, context: CommandContext, args: list[str]) -> CommandReply:
        del context, args
        ledger = self._processor.ledger
        lines = ["🔍 **Estado del Bot**", "✅ Estado: Online"]
        lines.extend(
            f"📺 {label}: {value}" for label, value in self.channel_labels.items()
        )
        lines.extend(
            [
                f"📊 Porcentaje: {self._policy.rate}%",
                f"👥 Empleados: {ledger.employee_count}",
                f"📅 Semana: {format_local_date(ledger.period_start, self._tz)}",
            ]
        )
        return CommandReply.text("\n".join(lines))

    async def _help(self, context: CommandContext, args: list[str]) -> CommandReply:
        del context, args
        lines = ["📋 **Comandos**"]
        lines.extend(f"`{usage}`: {summary}" for usage, summary in _HELP_LINES)
        lines.append(f"Bono actual: {self._policy.rate}%")
        return CommandReply.text("\n".join(lines))

    async def _test_log(self, context: CommandContext, args: list[str]) -> CommandReply:
        text = " ".join(args)
        if not text:
            raise CommandValidationError.usage("`!test-log [mensaje]`")

        now = self._clock.now()
        message = ChatMessage(
            id=f"test-{int(now.timestamp() * 1000)}",
            channel_id=context.channel_id,
            content=text,
            created_at=now,
            author_id=context.author_id,
        )
        echo = f"🧪 Probando:\n```{text}```"
        if self._processor.process_safely(message):
            return CommandReply.text(echo, "✅ Venta registrada! Usa `!report` para ver.")
        return CommandReply.text(
            echo, "❌ No se procesó como venta. Verifica el formato."
        )

    async def _close(self, context: CommandContext, args: list[str]) -> CommandReply:
        del context, args
        report = self.close_week()
        return CommandReply.text(report, "✅ Semana cerrada. Datos reseteados.")

    async def _set_bonus_rate(
        self, context: CommandContext, args: list[str]
    ) -> CommandReply:
        del context
        if not args:
            raise CommandValidationError.usage("`!set-bonus-rate N` (0-100)")
        try:
            requested = int(args[0])
        except ValueError as exc:
            raise BonusRateError(args[0]) from exc
        rate = self._policy.update(requested)
        log_info(logger, "Bonus rate set to %d%%", rate)
        return CommandReply.text(f"✅ Porcentaje: **{rate}%**")

    def _backfill_request(self, args: list[str]) -> BackfillRequest:
        usage = "`!backfill by-date DD/MM/YYYY` o `!backfill by-count 100`"
        if len(args) < 2:  # noqa: PLR2004 - mode plus value
            raise CommandValidationError.usage(usage)
        mode, value = args[0].lower(), args[1]
        if mode in _BACKFILL_DATE_MODES:
            return BackfillRequest.by_date(value, self._tz)
        if mode in _BACKFILL_COUNT_MODES:
            return BackfillRequest.by_count(value)
        raise CommandValidationError.usage(usage)

    async def _run_backfill(
        self, context: CommandContext, args: list[str]
    ) -> CommandReply:
        request = self._backfill_request(args)
        if self._backfill is None:
            return CommandReply.rejected("Canal de logs no disponible.")

        await context.send("⏳ Leyendo logs...")
        try:
            result = await self._backfill.run(request)
        except Exception as exc:  # noqa: BLE001 - reported to the caller, already logged
            log_exception(logger, "Backfill command failed", exc)
            return CommandReply.rejected("Error al procesar logs.")

        summary = (
            "✅ **Logs Procesados**\n"
            f"📥 Leídos: {result.fetched} | 💰 Ventas: {result.sales}"
            f" | 👥 Empleados: {result.employees}"
        )
        if result.sales > 0:
            return CommandReply.text(
                summary, f"📊 Total acumulado: {format_money(result.total_sales)}"
            )
        return CommandReply.text(summary)


__all__ = [
    "COMMAND_PREFIX",
    "CommandContext",
    "CommandReply",
    "CommandRouter",
    "parse_command",
]
