"""Utility helpers for calculator modules."""

from __future__ import annotations

from typing import Any

from ringgitplan.backend.app.models.coercion import clamp_non_negative, coerce_number


def format_percentage(value: float) -> str:
    """Return a human-readable label for ``value`` expressed in percent."""

    if float(int(value)) == value:
        return f"{int(value)}%"
    return f"{value:.2f}%"


def format_currency(value: Any) -> str:
    """Format ``value`` as ringgit with thousands separators."""

    number = coerce_number(value)
    sign = "-" if number < 0 else ""
    return f"{sign}RM{abs(number):,.2f}"


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)


__all__ = [
    "clamp_non_negative",
    "coerce_number",
    "format_currency",
    "format_percentage",
    "round_currency",
    "round_rate",
]
