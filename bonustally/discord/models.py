"""Typed chat messages consumed by the log processor."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt


@dataclasses.dataclass(frozen=True, slots=True)
class ChatMessage:
    """An inbound chat message reduced to the fields the bot uses."""

    id: str
    channel_id: str
    content: str
    created_at: dt.datetime
    author_id: str = ""
    author_is_bot: bool = False

    @property
    def snowflake(self) -> int:
        """Return the numeric message id for ordering, or 0 if not numeric."""
        return int(self.id) if self.id.isdigit() else 0
