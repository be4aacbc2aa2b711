"""Administrator and user commands read from the bonus channel."""

from __future__ import annotations

from .errors import CommandError, CommandValidationError, PermissionDeniedError
from .router import (
    COMMAND_PREFIX,
    CommandContext,
    CommandReply,
    CommandRouter,
    parse_command,
)

__all__ = [
    "COMMAND_PREFIX",
    "CommandContext",
    "CommandError",
    "CommandReply",
    "CommandRouter",
    "CommandValidationError",
    "PermissionDeniedError",
    "parse_command",
]
