"""Currency formatting for rendered reports."""

from __future__ import annotations


def format_amount(amount: int) -> str:
    """Format an integer amount with ``.`` thousands separators (es-AR).

    >>> format_amount(1234567)
    '1.234.567'

    """
    return f"{amount:,}".replace(",", ".")


def format_money(amount: int) -> str:
    """Format an amount with a leading dollar sign."""
    return f"${format_amount(amount)}"
