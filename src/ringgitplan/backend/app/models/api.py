"""Pydantic models describing the public API surface."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .coercion import RebateFlag, SelfRebateFlag, coerce_number

__all__ = [
    "AllocationRequest",
    "AllocationResponse",
    "BudgetFormulaPayload",
    "ContributionsInput",
    "DeductionsInput",
    "PlanRequest",
    "PlanResponse",
    "ResponseMeta",
    "TaxBracketPayload",
    "TaxRequest",
    "TaxResponse",
    "format_validation_error",
]


def _coerce_optional(value: Any) -> float | None:
    if value is None:
        return None
    return coerce_number(value)


class DeductionsInput(BaseModel):
    """Statutory rate overrides; omitted fields fall back to year defaults."""

    model_config = ConfigDict(extra="forbid")

    epf_rate: float | None = None
    socso_rate: float | None = None
    socso_ceiling: float | None = None
    eis_rate: float | None = None
    eis_ceiling: float | None = None

    @field_validator(
        "epf_rate",
        "socso_rate",
        "socso_ceiling",
        "eis_rate",
        "eis_ceiling",
        mode="before",
    )
    @classmethod
    def _coerce_values(cls, value: Any) -> float | None:
        return _coerce_optional(value)

    def overrides(self) -> dict[str, float]:
        return self.model_dump(exclude_none=True)


class ContributionsInput(BaseModel):
    """Monthly EPF/SOCSO/EIS contributions used as tax reliefs."""

    model_config = ConfigDict(extra="forbid")

    epf_monthly: float | None = None
    socso_monthly: float | None = None
    eis_monthly: float | None = None

    @field_validator("epf_monthly", "socso_monthly", "eis_monthly", mode="before")
    @classmethod
    def _coerce_values(cls, value: Any) -> float | None:
        return _coerce_optional(value)


class _YearScopedRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    year: int | None = Field(default=None, ge=0)


def _coerce_necessities(value: Any) -> Mapping[str, Any]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return value
    raise ValueError("Necessities section must be an object mapping names to amounts")


class AllocationRequest(_YearScopedRequest):
    """Payload accepted by the allocation endpoint."""

    salary: float = 0.0
    deductions: DeductionsInput = Field(default_factory=DeductionsInput)
    necessities: dict[str, Any] = Field(default_factory=dict)

    @field_validator("salary", mode="before")
    @classmethod
    def _coerce_salary(cls, value: Any) -> float:
        return coerce_number(value)

    @field_validator("deductions", mode="before")
    @classmethod
    def _default_deductions(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("necessities", mode="before")
    @classmethod
    def _normalise_necessities(cls, value: Any) -> Mapping[str, Any]:
        return _coerce_necessities(value)


class TaxRequest(_YearScopedRequest):
    """Payload accepted by the income tax endpoint.

    Either ``chargeable_income`` is given directly, or it is derived from
    ``monthly_gross``, ``annual_reliefs`` and optional contributions.
    """

    chargeable_income: float | None = None
    monthly_gross: float | None = None
    annual_reliefs: float = 0.0
    contributions: ContributionsInput | None = None
    apply_self_rebate: SelfRebateFlag = True
    spouse_rebate: RebateFlag = False

    @field_validator("chargeable_income", "monthly_gross", mode="before")
    @classmethod
    def _coerce_income(cls, value: Any) -> float | None:
        return _coerce_optional(value)

    @field_validator("annual_reliefs", mode="before")
    @classmethod
    def _coerce_reliefs(cls, value: Any) -> float:
        return coerce_number(value)

    @model_validator(mode="after")
    def _require_income(self) -> "TaxRequest":
        if self.chargeable_income is None and self.monthly_gross is None:
            raise ValueError("Provide either chargeable_income or monthly_gross")
        return self


class PlanRequest(AllocationRequest):
    """Allocation inputs plus the tax options used for the monthly estimate."""

    annual_reliefs: float = 0.0
    apply_self_rebate: SelfRebateFlag = True
    spouse_rebate: RebateFlag = False

    @field_validator("annual_reliefs", mode="before")
    @classmethod
    def _coerce_reliefs(cls, value: Any) -> float:
        return coerce_number(value)


class BudgetFormulaPayload(BaseModel):
    """Serialised budget formula."""

    model_config = ConfigDict(extra="forbid")

    name: str
    needs_pct: float
    wants_pct: float
    savings_pct: float
    custom: bool


class TaxBracketPayload(BaseModel):
    """Serialised tax bracket."""

    model_config = ConfigDict(extra="forbid")

    lower: float
    upper: float | None
    rate: float
    base_tax: float


class ResponseMeta(BaseModel):
    """Metadata returned alongside calculation output."""

    model_config = ConfigDict(extra="forbid")

    year: int
    currency: str = "MYR"


class AllocationResponse(BaseModel):
    """Monthly deductions, net salary and the budget split."""

    model_config = ConfigDict(extra="forbid")

    gross: float
    epf_amount: float
    socso_amount: float
    eis_amount: float
    total_deductions: float
    net: float
    necessities_total: float
    necessity_pct: float
    formula: BudgetFormulaPayload
    needs_amount: float
    wants_amount: float
    savings_amount: float
    meta: ResponseMeta | None = None


class TaxResponse(BaseModel):
    """Annual tax due for a chargeable income."""

    model_config = ConfigDict(extra="forbid")

    chargeable_income: float
    annual_tax: float
    monthly_tax: float
    effective_rate: float
    rebate_eligible: bool
    bracket: TaxBracketPayload | None = None
    meta: ResponseMeta | None = None


class PlanResponse(BaseModel):
    """Combined allocation and tax estimate for a monthly salary."""

    model_config = ConfigDict(extra="forbid")

    allocation: AllocationResponse
    tax: TaxResponse
    net_after_tax_monthly: float
    meta: ResponseMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
