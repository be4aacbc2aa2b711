"""Apply classified log lines to the sales ledger.

:meth:`LogProcessor.handle_message` is the live entry point: it drops bot
and off-channel messages and contains failures so that one bad message never
stops the ones after it. The backfill driver calls
:meth:`LogProcessor.process_safely` directly because history replay applies
every stored message regardless of author.
"""

from __future__ import annotations

import typing as typ

from bonustally.parsing.classify import LineClassifier, LineKind

from .observability import IngestionEventLogger

if typ.TYPE_CHECKING:
    from bonustally.discord.models import ChatMessage
    from bonustally.ledger.service import SalesLedger


class LogProcessor:
    """Classify messages and record sales and names in the ledger."""

    def __init__(
        self,
        ledger: SalesLedger,
        *,
        classifier: LineClassifier | None = None,
        log_channel_id: str | None = None,
        event_logger: IngestionEventLogger | None = None,
    ) -> None:
        """Bind the processor to the ledger it mutates."""
        self._ledger = ledger
        self._classifier = classifier or LineClassifier()
        self._log_channel_id = log_channel_id
        self._event_logger = event_logger or IngestionEventLogger()

    @property
    def ledger(self) -> SalesLedger:
        """Return the ledger this processor writes to."""
        return self._ledger

    def accepts(self, message: ChatMessage) -> bool:
        """Return True for human messages in the configured log channel."""
        if message.author_is_bot:
            return False
        return self._log_channel_id is None or message.channel_id == self._log_channel_id

    def handle_message(self, message: ChatMessage) -> bool:
        """Process a live message; return True when it recorded a sale."""
        if not self.accepts(message):
            return False
        return self.process_safely(message)

    def process_safely(self, message: ChatMessage) -> bool:
        """Process ``message``, logging instead of raising on failure."""
        try:
            return self.process(message)
        except Exception as exc:  # noqa: BLE001 - isolate per-message failures
            self._event_logger.log_message_failed(message, exc)
            return False

    def process(self, message: ChatMessage) -> bool:
        """Classify ``message`` and apply it; return True for a recorded sale."""
        line = self._classifier.classify(message.content)

        if line.kind is LineKind.SALE and line.identifier is not None:
            self._ledger.record_sale(
                line.identifier, line.amount, message.created_at, message.id
            )
            self._event_logger.log_sale_recorded(
                message, line, self._ledger.total_for(line.identifier)
            )
            return True

        if (
            line.kind is LineKind.NAME_UPDATE
            and line.identifier is not None
            and line.name is not None
        ):
            self._ledger.update_name(line.identifier, line.name)
            self._event_logger.log_name_updated(message, line)
            return False

        self._event_logger.log_line_ignored(message, line)
        return False
