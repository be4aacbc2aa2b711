"""Discord REST adapter errors."""

from __future__ import annotations


class DiscordAPIError(RuntimeError):
    """Raised when Discord returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, path: str) -> DiscordAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(f"Discord API HTTP {status_code} for {path}", status_code=status_code)

    @classmethod
    def transport(cls, path: str, reason: object) -> DiscordAPIError:
        """Return an error for requests that never got a response."""
        return cls(f"Discord API request to {path} failed: {reason}")


class DiscordResponseShapeError(RuntimeError):
    """Raised when a Discord response body does not match the expected shape."""

    @classmethod
    def invalid(cls, path: str, reason: object) -> DiscordResponseShapeError:
        """Return an error describing the decode failure."""
        return cls(f"Discord API response for {path} has unexpected shape: {reason}")


class DiscordConfigError(RuntimeError):
    """Raised when the Discord client configuration is invalid."""

    @classmethod
    def empty_token(cls) -> DiscordConfigError:
        """Return an error when the bot token is blank."""
        return cls("Discord bot token must be non-empty")
