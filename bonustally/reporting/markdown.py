"""Markdown rendering for weekly bonus reports.

Discord renders a subset of Markdown, so reports are plain text with bold
names and emoji rank markers rather than rich embeds.

Usage
-----
>>> from bonustally.reporting.markdown import render_bonus_report
>>> text = render_bonus_report(report, tz=ZoneInfo("America/Argentina/Buenos_Aires"))

"""

from __future__ import annotations

import typing as typ

from bonustally.common.money import format_money
from bonustally.common.time import to_local

if typ.TYPE_CHECKING:
    import datetime as dt
    from zoneinfo import ZoneInfo

    from .bonus import BonusLine, BonusReport

_RANK_MARKERS: tuple[str, ...] = ("🥇", "🥈", "🥉")
_DEFAULT_MARKER = "▫️"


def rank_marker(index: int) -> str:
    """Return the marker for the zero-based rank ``index``."""
    if index < len(_RANK_MARKERS):
        return _RANK_MARKERS[index]
    return _DEFAULT_MARKER


def format_local_date(value: dt.datetime, tz: ZoneInfo) -> str:
    """Format a timestamp as ``d/m/yyyy`` in the local zone."""
    local = to_local(value, tz)
    return f"{local.day}/{local.month}/{local.year}"


def _render_header(lines: list[str], report: BonusReport, tz: ZoneInfo) -> None:
    start = format_local_date(report.period_start, tz)
    end = format_local_date(report.generated_at, tz)
    lines.append("# 📊 REPORTE SEMANAL DE BONOS")
    lines.append("")
    lines.append(f"**Período:** {start} - {end}")
    lines.append("")


def _render_totals(lines: list[str], report: BonusReport) -> None:
    lines.append(f"💵 **Total Ventas:** {format_money(report.total_sales)}")
    lines.append(f"🎁 **Total Bonos:** {format_money(report.total_bonus)}")
    lines.append(f"📈 **Porcentaje:** {report.bonus_rate}%")
    lines.append("")


def _line_summary(line: BonusLine) -> str:
    return (
        f"{line.sale_count} venta(s) → {format_money(line.total_sales)}"
        f" → Bono: {format_money(line.bonus_amount)}"
    )


def _render_top(lines: list[str], top: BonusLine) -> None:
    lines.append("## 🏆 EMPLEADO DESTACADO")
    lines.append("")
    lines.append(f"**{top.display_name}** ({top.identifier})")
    lines.append(_line_summary(top))
    lines.append("")


def _render_detail(lines: list[str], report: BonusReport) -> None:
    lines.append("## 👥 Detalle por Empleado")
    lines.append("")
    for index, line in enumerate(report.lines):
        lines.append(f"{rank_marker(index)} **{line.display_name}** ({line.identifier})")
        lines.append(f"   └ {_line_summary(line)}")
    lines.append("")


def render_bonus_report(report: BonusReport, *, tz: ZoneInfo) -> str:
    """Render ``report`` as a Markdown message.

    Parameters
    ----------
    report
        Calculated bonus report.
    tz
        Zone used to display the period dates.

    Returns
    -------
    str
        The Markdown text, ending without a trailing newline.

    """
    lines: list[str] = []
    _render_header(lines, report, tz)
    _render_totals(lines, report)

    top = report.top
    if top is None:
        lines.append("❌ **Sin datos:** No hay ventas registradas esta semana.")
        return "\n".join(lines)

    _render_top(lines, top)
    _render_detail(lines, report)
    return "\n".join(lines).rstrip("\n")


__all__ = ["format_local_date", "rank_marker", "render_bonus_report"]
