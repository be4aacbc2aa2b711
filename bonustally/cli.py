"""Command-line entry points for running the bot and inspecting its data.

Usage:
    bonustally run                       # start the Discord bot
    bonustally report                    # print the current bonus report
    bonustally parse "<log line>"        # show how a log line is classified
    bonustally reset                     # start a new period in the snapshot
"""

from __future__ import annotations

import typing as typ
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from cyclopts import App, Parameter

from bonustally import __version__
from bonustally.common.time import utcnow
from bonustally.ledger.errors import SnapshotStoreError
from bonustally.ledger.service import SalesLedger
from bonustally.ledger.storage import JsonSnapshotStore
from bonustally.lifecycle.week import WeekLifecycle
from bonustally.parsing.classify import LineClassifier
from bonustally.reporting.bonus import build_bonus_report
from bonustally.reporting.errors import BonusRateError
from bonustally.reporting.markdown import render_bonus_report

app = App(
    name="bonustally",
    help="Weekly sales bonus tally from Discord log messages",
    version=__version__,
)

_DEFAULT_DATA_FILE = Path("employees_data.json")
_DEFAULT_TIMEZONE = "America/Argentina/Buenos_Aires"


@app.command
def run() -> int:
    """Start the bot using configuration from the environment.

    Returns:
        Exit code (0 after a clean shutdown).

    """
    from bonustally.runtime import main as runtime_main

    runtime_main()
    return 0


@app.command
def report(
    *,
    data_file: typ.Annotated[
        Path, Parameter(env_var="BONUSTALLY_DATA_FILE")
    ] = _DEFAULT_DATA_FILE,
    rate: typ.Annotated[int, Parameter(env_var="BONUS_PERCENTAGE")] = 20,
    timezone: typ.Annotated[str, Parameter(env_var="TIMEZONE")] = _DEFAULT_TIMEZONE,
) -> int:
    """Print the bonus report for the snapshot's current period.

    Args:
        data_file: Snapshot file written by the bot.
        rate: Bonus percentage (0-100).
        timezone: Zone used to display period dates.

    Returns:
        Exit code (0 on success, 1 when the snapshot or options are unusable).

    """
    try:
        tz = ZoneInfo(timezone)
        state = JsonSnapshotStore(data_file).load()
        if state is None:
            print(f"No snapshot found at {data_file}")
            return 1
        bonus_report = build_bonus_report(state, rate, generated_at=utcnow())
    except (SnapshotStoreError, BonusRateError, ZoneInfoNotFoundError) as exc:
        print(f"Cannot build report: {exc}")
        return 1

    print(render_bonus_report(bonus_report, tz=tz))
    return 0


@app.command
def parse(text: str) -> int:
    """Classify a single log line and print the extracted fields.

    Args:
        text: Raw log line, markup included.

    Returns:
        Exit code (0 when the line is a sale, 1 otherwise).

    """
    line = LineClassifier().classify(text)
    print(f"kind: {line.kind}")
    print(f"identifier: {line.identifier}")
    print(f"amount: {line.amount}")
    print(f"name: {line.name}")
    return 0 if line.is_sale else 1


@app.command
def reset(
    *,
    data_file: typ.Annotated[
        Path, Parameter(env_var="BONUSTALLY_DATA_FILE")
    ] = _DEFAULT_DATA_FILE,
) -> int:
    """Discard the snapshot's sales and start a new period now.

    Args:
        data_file: Snapshot file written by the bot.

    Returns:
        Exit code (0 on success, 1 when the snapshot cannot be read or
        written). An unreadable snapshot is left untouched.

    """
    store = JsonSnapshotStore(data_file)
    try:
        state = store.load()
    except SnapshotStoreError as exc:
        print(f"Cannot reset: {exc}")
        return 1

    ledger = SalesLedger(state)
    period_start = WeekLifecycle(ledger).reset()
    try:
        store.save(ledger.snapshot())
    except SnapshotStoreError as exc:
        print(f"Cannot reset: {exc}")
        return 1
    print(f"New period started at {period_start.isoformat()}")
    return 0


def main() -> int:
    """Entry point for the CLI."""
    return app()


if __name__ == "__main__":
    raise SystemExit(main())
