"""Discord REST adapter: message model, client and channel polling."""

from __future__ import annotations

from .client import (
    MAX_PAGE_SIZE,
    ChannelHistorySource,
    DiscordConfig,
    DiscordRestClient,
    chunk_content,
)
from .errors import DiscordAPIError, DiscordConfigError, DiscordResponseShapeError
from .models import ChatMessage
from .polling import ChannelPoller

__all__ = [
    "MAX_PAGE_SIZE",
    "ChannelHistorySource",
    "ChannelPoller",
    "ChatMessage",
    "DiscordAPIError",
    "DiscordConfig",
    "DiscordConfigError",
    "DiscordResponseShapeError",
    "DiscordRestClient",
    "chunk_content",
]
