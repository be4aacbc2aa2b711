"""Poll a channel for messages posted since the last poll."""

from __future__ import annotations

import typing as typ

from .client import MAX_PAGE_SIZE

if typ.TYPE_CHECKING:
    from .client import DiscordRestClient
    from .models import ChatMessage


class ChannelPoller:
    """Yield each new channel message once, oldest first.

    The first poll only records the newest existing message as the starting
    point; history before the bot started is left to the backfill driver.
    """

    def __init__(self, client: DiscordRestClient, channel_id: str) -> None:
        """Bind the poller to a client and channel."""
        self._client = client
        self._channel_id = channel_id
        self._last_seen: str | None = None
        self._primed = False

    @property
    def channel_id(self) -> str:
        """Return the polled channel id."""
        return self._channel_id

    @property
    def last_seen(self) -> str | None:
        """Return the id of the newest message seen so far."""
        return self._last_seen

    async def prime(self) -> None:
        """Remember the newest existing message without returning it."""
        latest = await self._client.fetch_messages(self._channel_id, limit=1)
        if latest:
            self._last_seen = latest[0].id
        self._primed = True

    async def poll(self) -> list[ChatMessage]:
        """Return messages newer than the last poll in chronological order.

        The cursor only moves once every page has been fetched, so a failed
        fetch leaves it in place and the next poll delivers the whole batch.
        """
        if not self._primed:
            await self.prime()
            return []

        collected: list[ChatMessage] = []
        cursor = self._last_seen
        while True:
            page = await self._client.fetch_messages(
                self._channel_id, after=cursor, limit=MAX_PAGE_SIZE
            )
            if not page:
                break
            page.sort(key=lambda message: message.snowflake)
            collected.extend(page)
            cursor = page[-1].id
            if len(page) < MAX_PAGE_SIZE:
                break
        self._last_seen = cursor
        return collected
