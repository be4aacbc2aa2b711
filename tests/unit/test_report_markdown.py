"""Unit tests for Markdown bonus reports."""

from __future__ import annotations

import datetime as dt
import typing as typ

import pytest

from bonustally.common.money import format_amount, format_money
from bonustally.reporting.bonus import BonusLine, BonusReport
from bonustally.reporting.markdown import (
    format_local_date,
    rank_marker,
    render_bonus_report,
)
from tests.support.fakes import BASE_TIME

if typ.TYPE_CHECKING:
    from zoneinfo import ZoneInfo


def _line(identifier: str, name: str, total: int, bonus: int) -> BonusLine:
    return BonusLine(
        identifier=identifier,
        display_name=name,
        sale_count=1,
        total_sales=total,
        bonus_amount=bonus,
    )


def _report(*lines: BonusLine) -> BonusReport:
    return BonusReport(
        period_start=dt.datetime(2099, 1, 5, 2, 0, tzinfo=dt.UTC),
        generated_at=BASE_TIME,
        bonus_rate=20,
        lines=lines,
    )


@pytest.mark.parametrize(
    ("amount", "expected"),
    [(0, "0"), (999, "999"), (1500, "1.500"), (1234567, "1.234.567")],
)
def test_format_amount_uses_dot_separators(amount: int, expected: str) -> None:
    """Thousands are separated with dots."""
    assert format_amount(amount) == expected
    assert format_money(amount) == f"${expected}"


@pytest.mark.parametrize(
    ("index", "expected"),
    [(0, "🥇"), (1, "🥈"), (2, "🥉"), (3, "▫️"), (10, "▫️")],
)
def test_rank_marker(index: int, expected: str) -> None:
    """The top three get medals, everyone else a neutral marker."""
    assert rank_marker(index) == expected


def test_format_local_date_converts_zone(local_tz: ZoneInfo) -> None:
    """Dates are shown in the local zone, not UTC."""
    # 02:00 UTC on the 5th is still the 4th in Buenos Aires (UTC-3).
    value = dt.datetime(2099, 1, 5, 2, 0, tzinfo=dt.UTC)

    assert format_local_date(value, local_tz) == "4/1/2099"


def test_render_report_lists_ranked_employees(local_tz: ZoneInfo) -> None:
    """A populated report has totals, the top employee and the detail list."""
    report = _report(
        _line("AAA00001", "Ana", 1000, 200),
        _line("BBB00002", "Beto", 500, 100),
        _line("CCC00003", "Caro", 300, 60),
        _line("DDD00004", "Dani", 100, 20),
    )

    text = render_bonus_report(report, tz=local_tz)

    assert text.startswith("# 📊 REPORTE SEMANAL DE BONOS")
    assert "**Período:** 4/1/2099 - 5/1/2099" in text
    assert "💵 **Total Ventas:** $1.900" in text
    assert "🎁 **Total Bonos:** $380" in text
    assert "📈 **Porcentaje:** 20%" in text
    assert "## 🏆 EMPLEADO DESTACADO\n\n**Ana** (AAA00001)" in text
    assert "🥇 **Ana** (AAA00001)\n   └ 1 venta(s) → $1.000 → Bono: $200" in text
    assert "🥈 **Beto** (BBB00002)" in text
    assert "🥉 **Caro** (CCC00003)" in text
    assert "▫️ **Dani** (DDD00004)" in text
    assert not text.endswith("\n")


def test_render_empty_report(local_tz: ZoneInfo) -> None:
    """An empty report says there is no data and lists nobody."""
    text = render_bonus_report(_report(), tz=local_tz)

    assert "❌ **Sin datos:** No hay ventas registradas esta semana." in text
    assert "💵 **Total Ventas:** $0" in text
    assert "EMPLEADO DESTACADO" not in text
