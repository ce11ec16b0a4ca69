"""Domain-specific calculation helpers."""

from .allocation import build_custom_formula, compute_allocation, select_budget_formula
from .deductions import compute_deductions
from .income_tax import (
    build_annual_chargeable_income,
    compute_annual_tax,
    estimate_monthly_tax_from_annual_chargeable,
    find_bracket,
)
from .utils import (
    clamp_non_negative,
    coerce_number,
    format_currency,
    format_percentage,
    round_currency,
    round_rate,
)

__all__ = [
    "build_annual_chargeable_income",
    "build_custom_formula",
    "clamp_non_negative",
    "coerce_number",
    "compute_allocation",
    "compute_annual_tax",
    "compute_deductions",
    "estimate_monthly_tax_from_annual_chargeable",
    "find_bracket",
    "format_currency",
    "format_percentage",
    "round_currency",
    "round_rate",
    "select_budget_formula",
]
