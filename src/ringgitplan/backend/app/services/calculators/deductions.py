"""Statutory payroll deductions (EPF, SOCSO, EIS)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ringgitplan.backend.app.models import DeductionBreakdown, DeductionConfig

from .utils import clamp_non_negative


def _capped_contribution(gross: float, rate: float, ceiling: float) -> float:
    # Only wages up to the ceiling form the contribution base.
    return min(gross, ceiling) * (rate / 100)


def compute_deductions(
    salary: Any, config: DeductionConfig | Mapping[str, Any] | None
) -> DeductionBreakdown:
    """Apply the monthly statutory deductions to ``salary``.

    EPF applies to the whole salary. SOCSO and EIS apply to the part of the
    salary up to their ceilings. Net salary never drops below zero, even when
    the configured rates would deduct more than the gross.
    """

    if not isinstance(config, DeductionConfig):
        config = DeductionConfig.model_validate(config or {})

    gross = clamp_non_negative(salary)
    epf_amount = gross * (config.epf_rate / 100)
    socso_amount = _capped_contribution(gross, config.socso_rate, config.socso_ceiling)
    eis_amount = _capped_contribution(gross, config.eis_rate, config.eis_ceiling)
    total = epf_amount + socso_amount + eis_amount

    return DeductionBreakdown(
        gross=gross,
        epf_amount=epf_amount,
        socso_amount=socso_amount,
        eis_amount=eis_amount,
        total_deductions=total,
        net=max(0.0, gross - total),
    )


__all__ = ["compute_deductions"]
