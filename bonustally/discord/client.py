"""Discord REST client used for channel history, polling and replies.

Only the handful of endpoints the bot needs are wrapped: listing channel
messages (newest first, paged with ``before``/``after``), posting a message
and reading a channel's name.
"""

from __future__ import annotations

import dataclasses
import datetime as dt  # noqa: TC003 - msgspec resolves annotations at runtime
import typing as typ

import httpx
import msgspec

from .errors import DiscordAPIError, DiscordConfigError, DiscordResponseShapeError
from .models import ChatMessage

DEFAULT_API_BASE = "https://discord.com/api/v10"
MAX_PAGE_SIZE = 100
MAX_MESSAGE_LENGTH = 2000

_HTTP_ERROR_STATUS_THRESHOLD = 400


@dataclasses.dataclass(frozen=True, slots=True)
class DiscordConfig:
    """Configuration for the Discord REST API client."""

    token: str
    api_base: str = DEFAULT_API_BASE
    timeout_s: float = 20.0
    user_agent: str = "DiscordBot (https://github.com/bonustally/bonustally, 0.1)"


class _AuthorPayload(msgspec.Struct):
    id: str
    bot: bool = False


class _MessagePayload(msgspec.Struct):
    id: str
    channel_id: str
    timestamp: dt.datetime
    author: _AuthorPayload
    content: str = ""

    def to_message(self) -> ChatMessage:
        return ChatMessage(
            id=self.id,
            channel_id=self.channel_id,
            content=self.content,
            created_at=self.timestamp,
            author_id=self.author.id,
            author_is_bot=self.author.bot,
        )


class _ChannelPayload(msgspec.Struct):
    id: str
    name: str | None = None


def chunk_content(content: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split ``content`` on line boundaries into pieces of at most ``limit``.

    Single lines longer than ``limit`` are hard-split.
    """
    chunks: list[str] = []
    current = ""
    for line in content.splitlines():
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            candidate = line
        current = candidate
    if current:
        chunks.append(current)
    return chunks or [""]


class DiscordRestClient:
    """Thin async wrapper over the Discord REST API."""

    def __init__(
        self,
        config: DiscordConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise DiscordConfigError.empty_token()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bot {config.token}",
                "User-Agent": config.user_agent,
                "Accept": "application/json",
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_messages(
        self,
        channel_id: str,
        *,
        before: str | None = None,
        after: str | None = None,
        limit: int = MAX_PAGE_SIZE,
    ) -> list[ChatMessage]:
        """Return up to ``limit`` messages from a channel, newest first."""
        params: dict[str, str | int] = {"limit": max(1, min(limit, MAX_PAGE_SIZE))}
        if before is not None:
            params["before"] = before
        if after is not None:
            params["after"] = after

        path = f"/channels/{channel_id}/messages"
        response = await self._request("GET", path, params=params)
        payloads = self._decode(response, path, list[_MessagePayload])
        return [payload.to_message() for payload in payloads]

    async def send_message(self, channel_id: str, content: str) -> None:
        """Post ``content`` to a channel, split to fit the length limit."""
        path = f"/channels/{channel_id}/messages"
        for chunk in chunk_content(content):
            await self._request("POST", path, json={"content": chunk})

    async def fetch_channel_name(self, channel_id: str) -> str | None:
        """Return the channel's name, or ``None`` when it cannot be read."""
        path = f"/channels/{channel_id}"
        try:
            response = await self._request("GET", path)
            channel = self._decode(response, path, _ChannelPayload)
        except (DiscordAPIError, DiscordResponseShapeError):
            return None
        return channel.name

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs: typ.Any,  # noqa: ANN401
    ) -> httpx.Response:
        url = f"{self._config.api_base.rstrip('/')}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise DiscordAPIError.transport(path, exc) from exc
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise DiscordAPIError.http_error(response.status_code, path)
        return response

    @staticmethod
    def _decode[T](response: httpx.Response, path: str, kind: type[T]) -> T:
        try:
            return msgspec.json.decode(response.content, type=kind)
        except msgspec.DecodeError as exc:
            raise DiscordResponseShapeError.invalid(path, exc) from exc


class ChannelHistorySource:
    """Paginated history of one channel, newest first."""

    def __init__(self, client: DiscordRestClient, channel_id: str) -> None:
        """Bind the source to a client and channel."""
        self._client = client
        self._channel_id = channel_id

    @property
    def max_page_size(self) -> int:
        """Return the largest page the API serves."""
        return MAX_PAGE_SIZE

    async def fetch_page(
        self, *, before: str | None = None, limit: int = MAX_PAGE_SIZE
    ) -> list[ChatMessage]:
        """Return the page of messages older than ``before``."""
        return await self._client.fetch_messages(
            self._channel_id, before=before, limit=limit
        )


__all__ = [
    "DEFAULT_API_BASE",
    "MAX_MESSAGE_LENGTH",
    "MAX_PAGE_SIZE",
    "ChannelHistorySource",
    "DiscordConfig",
    "DiscordRestClient",
    "chunk_content",
]
