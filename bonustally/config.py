"""Runtime configuration read from environment variables.

Required:

- ``DISCORD_TOKEN``: bot token used for the REST API.
- ``LOGS_CHANNEL_ID``: channel whose messages are parsed as sales logs.
- ``BONUS_CHANNEL_ID``: channel where commands are read and reports posted.

Optional:

- ``BONUS_PERCENTAGE``: bonus rate 0–100 (default 20).
- ``TIMEZONE``: IANA zone for the weekly close and report dates
  (default ``America/Argentina/Buenos_Aires``).
- ``BONUSTALLY_DATA_FILE``: snapshot path (default ``employees_data.json``).
- ``BONUSTALLY_ADMIN_IDS``: comma-separated user ids allowed to run
  privileged commands.
- ``BONUSTALLY_POLL_INTERVAL``: seconds between channel polls, at most 60
  (default 15).
- ``BONUSTALLY_CLOSE_SCHEDULE``: weekly close as ``<weekday> <HH:MM>``
  (default ``sun 23:00``).
- ``BONUSTALLY_LOG_LEVEL``: log level name (default ``INFO``).
- ``DISCORD_API_BASE``: REST API base URL.
"""

from __future__ import annotations

import dataclasses
import os
import typing as typ
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from bonustally.discord.client import DEFAULT_API_BASE
from bonustally.lifecycle.errors import ScheduleError
from bonustally.lifecycle.schedule import WeeklySchedule
from bonustally.reporting.bonus import MAX_BONUS_RATE, MIN_BONUS_RATE

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_DEFAULT_BONUS_PERCENTAGE = 20
_DEFAULT_TIMEZONE = "America/Argentina/Buenos_Aires"
_DEFAULT_DATA_FILE = "employees_data.json"
_DEFAULT_POLL_INTERVAL_S = 15.0
_DEFAULT_CLOSE_SCHEDULE = "sun 23:00"
# Polling any coarser than the close minute could skip the weekly close.
_MAX_POLL_INTERVAL_S = 60.0


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""

    @classmethod
    def missing(cls, names: cabc.Iterable[str]) -> ConfigError:
        """Return an error listing missing required variables."""
        return cls(f"missing required environment variables: {', '.join(names)}")

    @classmethod
    def invalid(cls, name: str, raw: str, reason: str) -> ConfigError:
        """Return an error for a variable with an unusable value."""
        return cls(f"{name}={raw!r} is invalid: {reason}")


@dataclasses.dataclass(frozen=True, slots=True)
class BotConfig:
    """Settings for one bot process."""

    discord_token: str
    logs_channel_id: str
    bonus_channel_id: str
    bonus_percentage: int = _DEFAULT_BONUS_PERCENTAGE
    timezone: ZoneInfo = dataclasses.field(
        default_factory=lambda: ZoneInfo(_DEFAULT_TIMEZONE)
    )
    data_file: Path = dataclasses.field(default_factory=lambda: Path(_DEFAULT_DATA_FILE))
    admin_ids: frozenset[str] = frozenset()
    poll_interval_s: float = _DEFAULT_POLL_INTERVAL_S
    close_schedule: str = _DEFAULT_CLOSE_SCHEDULE
    log_level: str = "INFO"
    api_base: str = DEFAULT_API_BASE

    def weekly_schedule(self) -> WeeklySchedule:
        """Return the parsed weekly close schedule."""
        return WeeklySchedule.parse(self.close_schedule, self.timezone)

    @staticmethod
    def _parse_bonus_percentage(raw: str | None) -> int:
        """Parse the bonus rate; non-numeric values fall back to the default."""
        if raw is None or not raw.strip():
            return _DEFAULT_BONUS_PERCENTAGE
        try:
            value = int(raw)
        except ValueError:
            return _DEFAULT_BONUS_PERCENTAGE
        if not MIN_BONUS_RATE <= value <= MAX_BONUS_RATE:
            raise ConfigError.invalid(
                "BONUS_PERCENTAGE", raw, "must be between 0 and 100"
            )
        return value

    @staticmethod
    def _parse_timezone(raw: str | None) -> ZoneInfo:
        name = (raw or "").strip() or _DEFAULT_TIMEZONE
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError.invalid("TIMEZONE", name, "unknown time zone") from exc

    @staticmethod
    def _parse_poll_interval(raw: str | None) -> float:
        if raw is None or not raw.strip():
            return _DEFAULT_POLL_INTERVAL_S
        try:
            value = float(raw)
        except ValueError as exc:
            raise ConfigError.invalid(
                "BONUSTALLY_POLL_INTERVAL", raw, "must be a number of seconds"
            ) from exc
        if not 0 < value <= _MAX_POLL_INTERVAL_S:
            raise ConfigError.invalid(
                "BONUSTALLY_POLL_INTERVAL", raw, "must be in (0, 60] seconds"
            )
        return value

    @staticmethod
    def _parse_admin_ids(raw: str | None) -> frozenset[str]:
        if not raw:
            return frozenset()
        return frozenset(part.strip() for part in raw.split(",") if part.strip())

    @classmethod
    def from_env(cls, environ: cabc.Mapping[str, str] | None = None) -> BotConfig:
        """Build configuration from environment variables.

        Raises
        ------
        ConfigError
            If a required variable is missing or any value is invalid.

        """
        env = os.environ if environ is None else environ
        required = {
            name: env.get(name, "").strip()
            for name in ("DISCORD_TOKEN", "LOGS_CHANNEL_ID", "BONUS_CHANNEL_ID")
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigError.missing(missing)

        timezone = cls._parse_timezone(env.get("TIMEZONE"))
        close_schedule = (
            env.get("BONUSTALLY_CLOSE_SCHEDULE", "").strip() or _DEFAULT_CLOSE_SCHEDULE
        )
        try:
            WeeklySchedule.parse(close_schedule, timezone)
        except ScheduleError as exc:
            raise ConfigError.invalid(
                "BONUSTALLY_CLOSE_SCHEDULE", close_schedule, str(exc)
            ) from exc

        data_file = env.get("BONUSTALLY_DATA_FILE", "").strip() or _DEFAULT_DATA_FILE
        return cls(
            discord_token=required["DISCORD_TOKEN"],
            logs_channel_id=required["LOGS_CHANNEL_ID"],
            bonus_channel_id=required["BONUS_CHANNEL_ID"],
            bonus_percentage=cls._parse_bonus_percentage(env.get("BONUS_PERCENTAGE")),
            timezone=timezone,
            data_file=Path(data_file),
            admin_ids=cls._parse_admin_ids(env.get("BONUSTALLY_ADMIN_IDS")),
            poll_interval_s=cls._parse_poll_interval(
                env.get("BONUSTALLY_POLL_INTERVAL")
            ),
            close_schedule=close_schedule,
            log_level=env.get("BONUSTALLY_LOG_LEVEL", "INFO"),
            api_base=env.get("DISCORD_API_BASE", "").strip() or DEFAULT_API_BASE,
        )
