"""Budget formula selection and needs/wants/savings allocation."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from ringgitplan.backend.app.models import (
    AllocationResult,
    BudgetFormula,
    DeductionConfig,
    NecessitySpend,
)
from ringgitplan.backend.config.year_config import default_configuration

from .deductions import compute_deductions

_LOGGER = logging.getLogger(__name__)

# Savings targets for synthesised formulas; the lower one kicks in once
# necessities take more than HIGH_NEEDS_THRESHOLD percent of net income.
DEFAULT_SAVINGS_PCT = 20
HIGH_NEEDS_SAVINGS_PCT = 10
HIGH_NEEDS_THRESHOLD = 70


def build_custom_formula(necessity_pct: float) -> BudgetFormula:
    """Synthesise a formula whose needs share covers ``necessity_pct``."""

    if not math.isfinite(necessity_pct) or necessity_pct >= 100:
        needs = 100
    else:
        needs = math.ceil(necessity_pct)
    savings = HIGH_NEEDS_SAVINGS_PCT if needs > HIGH_NEEDS_THRESHOLD else DEFAULT_SAVINGS_PCT
    wants = 100 - needs - savings
    if wants < 0:
        savings = max(0, 100 - needs)
        wants = 100 - needs - savings

    return BudgetFormula(
        name=f"Custom {needs}/{wants}/{savings}",
        needs_pct=needs,
        wants_pct=wants,
        savings_pct=savings,
        custom=True,
    )


def select_budget_formula(
    necessity_pct: float, presets: Sequence[BudgetFormula]
) -> BudgetFormula:
    """Pick the preset with the smallest needs share that still covers spending.

    Presets are tried in ascending order of ``needs_pct``. When none is
    generous enough, a custom formula is built instead.
    """

    for preset in sorted(presets, key=lambda formula: formula.needs_pct):
        if preset.needs_pct >= necessity_pct:
            return preset

    formula = build_custom_formula(necessity_pct)
    _LOGGER.debug(
        "No preset covers necessities at %.2f%%; using %s", necessity_pct, formula.name
    )
    return formula


def compute_allocation(
    salary: Any,
    config: DeductionConfig | Mapping[str, Any] | None,
    necessity_spend: NecessitySpend | Mapping[str, Any] | None,
    presets: Sequence[BudgetFormula] | None = None,
) -> AllocationResult:
    """Compute net salary and split it across needs, wants and savings."""

    deductions = compute_deductions(salary, config)

    if not isinstance(necessity_spend, NecessitySpend):
        necessity_spend = NecessitySpend.model_validate(necessity_spend or {})
    necessities_total = necessity_spend.total

    net = deductions.net
    necessity_pct = necessities_total / net * 100 if net > 0 else 0.0

    if presets is None:
        presets = default_configuration().budget.presets
    formula = select_budget_formula(necessity_pct, presets)

    return AllocationResult(
        gross=deductions.gross,
        epf_amount=deductions.epf_amount,
        socso_amount=deductions.socso_amount,
        eis_amount=deductions.eis_amount,
        total_deductions=deductions.total_deductions,
        net=net,
        necessities_total=necessities_total,
        necessity_pct=necessity_pct,
        formula=formula,
        needs_amount=net * (formula.needs_pct / 100),
        wants_amount=net * (formula.wants_pct / 100),
        savings_amount=net * (formula.savings_pct / 100),
    )


__all__ = [
    "build_custom_formula",
    "compute_allocation",
    "select_budget_formula",
]
