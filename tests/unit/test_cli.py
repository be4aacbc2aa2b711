"""Unit tests for the command-line entry points."""

from __future__ import annotations

import json
import typing as typ

from bonustally import cli
from bonustally.ledger.models import AggregateState, EmployeeRecord, SaleEvent
from bonustally.ledger.storage import JsonSnapshotStore
from tests.support.fakes import BASE_TIME

if typ.TYPE_CHECKING:
    from pathlib import Path

    import pytest


def _write_snapshot(path: Path) -> None:
    JsonSnapshotStore(path).save(
        AggregateState(
            period_start=BASE_TIME,
            employees={
                "ABC12345": EmployeeRecord(
                    display_name="Juan",
                    sale_events=[
                        SaleEvent(
                            amount=1500, occurred_at=BASE_TIME, source_message_id="m1"
                        )
                    ],
                )
            },
        )
    )


def test_app_metadata() -> None:
    """The CLI is registered under the project name."""
    assert "bonustally" in cli.app.name


def test_parse_sale(capsys: pytest.CaptureFixture[str]) -> None:
    """A sale line exits 0 and prints its fields."""
    code = cli.parse("El cliente ha pagado una factura de [ABC12345] por $1,500")

    out = capsys.readouterr().out
    assert code == 0
    assert "kind: sale" in out
    assert "identifier: ABC12345" in out
    assert "amount: 1500" in out


def test_parse_noise(capsys: pytest.CaptureFixture[str]) -> None:
    """A non-sale line exits 1."""
    assert cli.parse("hola") == 1
    assert "kind: noise" in capsys.readouterr().out


def test_report_prints_markdown(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """The report command renders the stored period."""
    path = tmp_path / "data.json"
    _write_snapshot(path)

    code = cli.report(data_file=path, rate=10, timezone="UTC")

    out = capsys.readouterr().out
    assert code == 0
    assert "🥇 **Juan** (ABC12345)" in out
    assert "Bono: $150" in out


def test_report_without_snapshot(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A missing snapshot is reported with exit code 1."""
    assert cli.report(data_file=tmp_path / "none.json") == 1
    assert "No snapshot found" in capsys.readouterr().out


def test_report_rejects_bad_rate(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """An out-of-range rate exits 1."""
    path = tmp_path / "data.json"
    _write_snapshot(path)

    assert cli.report(data_file=path, rate=300) == 1
    assert "Cannot build report" in capsys.readouterr().out


def test_reset_clears_snapshot(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Reset empties the stored employees."""
    path = tmp_path / "data.json"
    _write_snapshot(path)

    assert cli.reset(data_file=path) == 0

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["employees"] == {}
    assert "New period started" in capsys.readouterr().out


def test_reset_keeps_unreadable_snapshot(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A corrupt snapshot is reported and left as it was."""
    path = tmp_path / "data.json"
    path.write_text("{not json", encoding="utf-8")

    assert cli.reset(data_file=path) == 1

    assert path.read_text(encoding="utf-8") == "{not json"
    assert "Cannot reset" in capsys.readouterr().out


def test_reset_creates_missing_snapshot(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Resetting without a snapshot writes an empty period."""
    path = tmp_path / "data.json"

    assert cli.reset(data_file=path) == 0

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["employees"] == {}
    assert "New period started" in capsys.readouterr().out
