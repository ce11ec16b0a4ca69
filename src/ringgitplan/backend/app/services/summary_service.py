"""Plain-text rendering of computed salary plans for sharing or export."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable

from .calculators import format_currency, format_percentage

_ALLOCATION_ROWS: tuple[tuple[str, str], ...] = (
    ("gross", "Gross salary"),
    ("epf_amount", "EPF"),
    ("socso_amount", "SOCSO"),
    ("eis_amount", "EIS"),
    ("net", "Net salary"),
    ("necessities_total", "Necessities"),
)

_TAX_ROWS: tuple[tuple[str, str], ...] = (
    ("chargeable_income", "Chargeable income (annual)"),
    ("annual_tax", "Income tax (annual)"),
    ("monthly_tax", "Income tax (monthly estimate)"),
)


def _rows(section: Mapping[str, Any], rows: Iterable[tuple[str, str]]) -> list[str]:
    lines: list[str] = []
    for key, label in rows:
        if key in section:
            lines.append(f"{label}: {format_currency(section[key])}")
    return lines


def _formula_lines(allocation: Mapping[str, Any]) -> list[str]:
    formula = allocation.get("formula")
    if not isinstance(formula, Mapping):
        return []

    name = str(formula.get("name", ""))
    marked = "custom" in name.lower()
    suffix = " (custom)" if formula.get("custom") and not marked else ""
    lines = [f"Budget formula: {name}{suffix}"]
    for label, pct_key, amount_key in (
        ("Needs", "needs_pct", "needs_amount"),
        ("Wants", "wants_pct", "wants_amount"),
        ("Savings", "savings_pct", "savings_amount"),
    ):
        pct = float(formula.get(pct_key, 0) or 0)
        amount = format_currency(allocation.get(amount_key, 0))
        lines.append(f"  {label} {format_percentage(pct)}: {amount}")
    return lines


def render_plan_text(result: Mapping[str, Any]) -> str:
    """Render a calculation result as a short multi-line summary.

    Accepts the output of ``calculate_plan`` or ``calculate_allocation``; the
    tax section is included only when present.
    """

    allocation = result.get("allocation", result)
    if not isinstance(allocation, Mapping):
        allocation = {}

    lines = ["Salary plan summary"]
    meta = result.get("meta")
    if isinstance(meta, Mapping) and "year" in meta:
        lines[0] = f"Salary plan summary ({meta['year']})"
    lines.append("")
    lines.extend(_rows(allocation, _ALLOCATION_ROWS))

    pct = allocation.get("necessity_pct")
    if pct is not None:
        lines.append(f"Necessities share of net: {float(pct):.1f}%")

    formula_lines = _formula_lines(allocation)
    if formula_lines:
        lines.append("")
        lines.extend(formula_lines)

    tax = result.get("tax")
    if isinstance(tax, Mapping):
        lines.append("")
        lines.extend(_rows(tax, _TAX_ROWS))

    if "net_after_tax_monthly" in result:
        lines.append(
            f"Net after tax (monthly): {format_currency(result['net_after_tax_monthly'])}"
        )

    return "\n".join(lines) + "\n"


__all__ = ["render_plan_text"]
