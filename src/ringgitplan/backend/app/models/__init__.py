"""Value objects shared by the calculators and the HTTP layer.

Inputs are frozen Pydantic models that coerce loosely typed values (form
fields, JSON numbers, numeric strings) into plain floats, so the calculators
never have to deal with missing or malformed amounts. Derived results are
lightweight frozen dataclasses.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ringgitplan.backend.config.schema import BudgetFormula, DeductionDefaults

from .api import (
    AllocationRequest,
    AllocationResponse,
    BudgetFormulaPayload,
    ContributionsInput,
    DeductionsInput,
    PlanRequest,
    PlanResponse,
    TaxBracketPayload,
    TaxRequest,
    TaxResponse,
    format_validation_error,
)
from .coercion import RebateFlag, SelfRebateFlag, clamp_non_negative, coerce_number

__all__ = [
    "AllocationRequest",
    "AllocationResponse",
    "AllocationResult",
    "BudgetFormula",
    "BudgetFormulaPayload",
    "ContributionOptions",
    "ContributionsInput",
    "DeductionBreakdown",
    "DeductionConfig",
    "DeductionsInput",
    "NecessitySpend",
    "PlanRequest",
    "PlanResponse",
    "TaxBracketPayload",
    "TaxOptions",
    "TaxRequest",
    "TaxResponse",
    "clamp_non_negative",
    "coerce_number",
    "format_validation_error",
]


class DeductionConfig(BaseModel):
    """Statutory deduction rates (percent) and wage ceilings (RM).

    Negative values are kept as-is; callers own the sign of what they pass.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    epf_rate: float = 0.0
    socso_rate: float = 0.0
    socso_ceiling: float = 0.0
    eis_rate: float = 0.0
    eis_ceiling: float = 0.0

    @field_validator(
        "epf_rate",
        "socso_rate",
        "socso_ceiling",
        "eis_rate",
        "eis_ceiling",
        mode="before",
    )
    @classmethod
    def _coerce(cls, value: Any) -> float:
        return coerce_number(value)

    @classmethod
    def from_defaults(
        cls, defaults: DeductionDefaults, overrides: Mapping[str, Any] | None = None
    ) -> DeductionConfig:
        """Build a config from year defaults, replacing any supplied field."""

        values: dict[str, Any] = defaults.model_dump()
        if overrides:
            values.update(
                {key: value for key, value in overrides.items() if key in values}
            )
        return cls.model_validate(values)


class NecessitySpend(BaseModel):
    """Named monthly necessity amounts, each coerced and floored at zero."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    amounts: Mapping[str, float]

    @model_validator(mode="before")
    @classmethod
    def _wrap_flat_mapping(cls, data: Any) -> Any:
        if data is None:
            return {"amounts": {}}
        if isinstance(data, Mapping) and set(data) != {"amounts"}:
            return {"amounts": data}
        return data

    @field_validator("amounts", mode="before")
    @classmethod
    def _coerce_amounts(cls, value: Any) -> Mapping[str, float]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError("Necessity spending must be a mapping of names to amounts")
        return {str(key): clamp_non_negative(amount) for key, amount in value.items()}

    @property
    def total(self) -> float:
        return sum(self.amounts.values(), 0.0)


class TaxOptions(BaseModel):
    """Rebate switches for the income tax evaluator."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    apply_self_rebate: SelfRebateFlag = True
    spouse_rebate: RebateFlag = False


class ContributionOptions(BaseModel):
    """Monthly statutory contributions used to derive reliefs.

    ``None`` means the contribution was not supplied, which differs from an
    explicit zero for the SOCSO/EIS relief.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    epf_monthly: float | None = None
    socso_monthly: float | None = None
    eis_monthly: float | None = None

    @field_validator("epf_monthly", "socso_monthly", "eis_monthly", mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> float | None:
        if value is None:
            return None
        return coerce_number(value)


@dataclass(frozen=True)
class DeductionBreakdown:
    """Monthly statutory deductions and the resulting net salary."""

    gross: float
    epf_amount: float
    socso_amount: float
    eis_amount: float
    total_deductions: float
    net: float


@dataclass(frozen=True)
class AllocationResult:
    """Outcome of the deduction and budget allocation pipeline."""

    gross: float
    epf_amount: float
    socso_amount: float
    eis_amount: float
    total_deductions: float
    net: float
    necessities_total: float
    necessity_pct: float
    formula: BudgetFormula
    needs_amount: float
    wants_amount: float
    savings_amount: float

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            field.name: getattr(self, field.name)
            for field in fields(self)
            if field.name != "formula"
        }
        payload["formula"] = {
            "name": self.formula.name,
            "needs_pct": self.formula.needs_pct,
            "wants_pct": self.formula.wants_pct,
            "savings_pct": self.formula.savings_pct,
            "custom": self.formula.custom,
        }
        return payload
