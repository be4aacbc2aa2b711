"""Errors raised while handling chat commands."""

from __future__ import annotations


class CommandError(Exception):
    """Base class for command failures reported back to the caller."""


class PermissionDeniedError(CommandError):
    """Raised when a non-administrator invokes a privileged command."""

    def __init__(self, command: str) -> None:
        """Initialise with the rejected command name."""
        self.command = command
        super().__init__(f"only administrators can run !{command}")


class CommandValidationError(CommandError, ValueError):
    """Raised when command arguments are missing or malformed."""

    @classmethod
    def usage(cls, text: str) -> CommandValidationError:
        """Return an error carrying the correct usage text."""
        return cls(f"Uso: {text}")
