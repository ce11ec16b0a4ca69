"""Progressive personal income tax for resident individuals."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ringgitplan.backend.app.models import ContributionOptions, TaxOptions
from ringgitplan.backend.config.year_config import (
    TaxBracket,
    YearConfiguration,
    default_configuration,
)

from .utils import clamp_non_negative

MONTHS_PER_YEAR = 12


def _resolve_config(config: YearConfiguration | None) -> YearConfiguration:
    return config if config is not None else default_configuration()


def _resolve_tax_options(options: TaxOptions | Mapping[str, Any] | None) -> TaxOptions:
    if isinstance(options, TaxOptions):
        return options
    return TaxOptions.model_validate(options or {})


def _resolve_contributions(
    options: ContributionOptions | Mapping[str, Any] | None,
) -> ContributionOptions:
    if isinstance(options, ContributionOptions):
        return options
    return ContributionOptions.model_validate(options or {})


def find_bracket(amount: float, brackets: Sequence[TaxBracket]) -> TaxBracket | None:
    """Return the bracket whose ``(lower, upper]`` range contains ``amount``."""

    return next((bracket for bracket in brackets if bracket.contains(amount)), None)


def compute_annual_tax(
    chargeable_income: Any,
    options: TaxOptions | Mapping[str, Any] | None = None,
    *,
    config: YearConfiguration | None = None,
) -> float:
    """Calculate annual tax on ``chargeable_income``.

    Tax is the bracket's cumulative base plus the marginal rate on the part
    above its lower bound. Incomes up to the rebate threshold get the self
    rebate (on by default) and optionally the spouse rebate, deducted from
    the tax and floored at zero. The result is not rounded.
    """

    tax_config = _resolve_config(config).tax
    resolved = _resolve_tax_options(options)

    income = clamp_non_negative(chargeable_income)
    bracket = find_bracket(income, tax_config.brackets)
    if bracket is None:
        return 0.0

    upper = income if bracket.upper_bound is None else min(income, bracket.upper_bound)
    tax = bracket.base_tax + (upper - bracket.lower_bound) * bracket.rate

    rebates = tax_config.rebates
    if income <= rebates.income_threshold:
        rebate = 0.0
        if resolved.apply_self_rebate:
            rebate += rebates.self_amount
        if resolved.spouse_rebate:
            rebate += rebates.spouse_amount
        tax = max(0.0, tax - rebate)

    return tax


def estimate_monthly_tax_from_annual_chargeable(
    chargeable_income: Any,
    options: TaxOptions | Mapping[str, Any] | None = None,
    *,
    config: YearConfiguration | None = None,
) -> float:
    """Spread the annual tax evenly across twelve months."""

    return compute_annual_tax(chargeable_income, options, config=config) / MONTHS_PER_YEAR


def build_annual_chargeable_income(
    monthly_gross: Any,
    annual_reliefs: Any,
    options: ContributionOptions | Mapping[str, Any] | None = None,
    *,
    config: YearConfiguration | None = None,
) -> float:
    """Derive chargeable income from a monthly salary and annual reliefs.

    Monthly contributions, when supplied, are annualised and added to the
    reliefs subject to the configured caps: EPF on its own, SOCSO and EIS
    combined.
    """

    caps = _resolve_config(config).reliefs
    contributions = _resolve_contributions(options)

    annual_gross = clamp_non_negative(monthly_gross) * MONTHS_PER_YEAR
    total_reliefs = clamp_non_negative(annual_reliefs)

    if contributions.epf_monthly is not None:
        epf_annual = max(0.0, contributions.epf_monthly) * MONTHS_PER_YEAR
        total_reliefs += min(epf_annual, caps.epf_annual_cap)

    if contributions.socso_monthly is not None or contributions.eis_monthly is not None:
        socso_eis_annual = (
            max(0.0, contributions.socso_monthly or 0.0)
            + max(0.0, contributions.eis_monthly or 0.0)
        ) * MONTHS_PER_YEAR
        total_reliefs += min(socso_eis_annual, caps.socso_eis_annual_cap)

    return max(0.0, annual_gross - total_reliefs)


__all__ = [
    "build_annual_chargeable_income",
    "compute_annual_tax",
    "estimate_monthly_tax_from_annual_chargeable",
    "find_bracket",
]
