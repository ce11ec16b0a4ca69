"""Orchestrate request validation, year configuration and the calculators.

Each public entry point accepts either a raw mapping (typically decoded JSON)
or an already validated request model, runs the pure calculators against the
requested year's configuration, and returns a JSON-ready dictionary whose
amounts are rounded for display. The calculators themselves never round.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ringgitplan.backend.app.models import (
    AllocationRequest,
    AllocationResponse,
    AllocationResult,
    ContributionOptions,
    DeductionConfig,
    PlanRequest,
    PlanResponse,
    TaxOptions,
    TaxRequest,
    TaxResponse,
    format_validation_error,
)
from ringgitplan.backend.config.year_config import (
    YearConfiguration,
    default_year,
    load_year_configuration,
)

from .calculators import (
    build_annual_chargeable_income,
    compute_allocation,
    compute_annual_tax,
    find_bracket,
    round_currency,
    round_rate,
)

_LOGGER = logging.getLogger(__name__)

_RequestT = TypeVar("_RequestT", bound=BaseModel)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("RINGGITPLAN_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _log_timings(label: str, timings: dict[str, float] | None) -> None:
    if timings is None:
        return
    _LOGGER.debug(
        "%s timings (ms): %s",
        label,
        {name: round(duration * 1000, 3) for name, duration in timings.items()},
    )


def _validate_request(
    model: type[_RequestT], payload: Mapping[str, Any] | BaseModel
) -> _RequestT:
    if isinstance(payload, BaseModel):
        data: Any = payload.model_dump(mode="python")
    else:
        if not isinstance(payload, Mapping):
            raise ValueError("Payload must be a mapping")
        data = payload

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def _resolve_configuration(year: int | None) -> YearConfiguration:
    return load_year_configuration(year if year is not None else default_year())


def _meta(config: YearConfiguration) -> dict[str, Any]:
    return {"year": config.year, "currency": str(config.meta.get("currency", "MYR"))}


def _allocation_summary(result: AllocationResult) -> dict[str, Any]:
    payload = result.as_dict()
    for key, value in payload.items():
        if key == "formula":
            continue
        if key == "necessity_pct":
            payload[key] = round_rate(value)
        else:
            payload[key] = round_currency(value)
    return payload


def _tax_summary(
    chargeable_income: float,
    annual_tax: float,
    config: YearConfiguration,
) -> dict[str, Any]:
    monthly_tax = annual_tax / 12
    effective_rate = annual_tax / chargeable_income if chargeable_income > 0 else 0.0
    bracket = find_bracket(chargeable_income, config.tax.brackets)

    return {
        "chargeable_income": round_currency(chargeable_income),
        "annual_tax": round_currency(annual_tax),
        "monthly_tax": round_currency(monthly_tax),
        "effective_rate": round_rate(effective_rate),
        "rebate_eligible": chargeable_income <= config.tax.rebates.income_threshold,
        "bracket": bracket.as_payload() if bracket is not None else None,
    }


def _deduction_config(
    request: AllocationRequest, config: YearConfiguration
) -> DeductionConfig:
    return DeductionConfig.from_defaults(
        config.deductions.defaults, request.deductions.overrides()
    )


def calculate_allocation(
    payload: Mapping[str, Any] | AllocationRequest,
) -> dict[str, Any]:
    """Compute deductions, net salary and budget split for a monthly salary."""

    request = _validate_request(AllocationRequest, payload)
    timings: dict[str, float] | None = {} if _profiling_enabled() else None

    config = _resolve_configuration(request.year)
    with _profile_section("allocation", timings):
        result = compute_allocation(
            request.salary,
            _deduction_config(request, config),
            request.necessities,
            config.budget.presets,
        )
    _log_timings("calculate_allocation", timings)

    summary = _allocation_summary(result)
    summary["meta"] = _meta(config)
    return AllocationResponse.model_validate(summary).model_dump(mode="json")


def calculate_income_tax(payload: Mapping[str, Any] | TaxRequest) -> dict[str, Any]:
    """Compute annual and monthly tax for a chargeable or derived income."""

    request = _validate_request(TaxRequest, payload)
    timings: dict[str, float] | None = {} if _profiling_enabled() else None

    config = _resolve_configuration(request.year)
    options = TaxOptions(
        apply_self_rebate=request.apply_self_rebate,
        spouse_rebate=request.spouse_rebate,
    )

    with _profile_section("chargeable_income", timings):
        if request.chargeable_income is not None:
            chargeable_income = max(0.0, request.chargeable_income)
        else:
            contributions = ContributionOptions.model_validate(
                request.contributions.model_dump() if request.contributions else {}
            )
            chargeable_income = build_annual_chargeable_income(
                request.monthly_gross,
                request.annual_reliefs,
                contributions,
                config=config,
            )

    with _profile_section("tax", timings):
        annual_tax = compute_annual_tax(chargeable_income, options, config=config)
        summary = _tax_summary(chargeable_income, annual_tax, config)
    _log_timings("calculate_income_tax", timings)

    summary["meta"] = _meta(config)
    return TaxResponse.model_validate(summary).model_dump(mode="json")


def calculate_plan(payload: Mapping[str, Any] | PlanRequest) -> dict[str, Any]:
    """Combine the budget allocation with a monthly tax estimate.

    The statutory deductions computed for the allocation double as the
    EPF/SOCSO/EIS reliefs when deriving chargeable income.
    """

    request = _validate_request(PlanRequest, payload)
    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    config = _resolve_configuration(request.year)

    with _profile_section("allocation", timings):
        allocation = compute_allocation(
            request.salary,
            _deduction_config(request, config),
            request.necessities,
            config.budget.presets,
        )

    with _profile_section("tax", timings):
        contributions = ContributionOptions(
            epf_monthly=allocation.epf_amount,
            socso_monthly=allocation.socso_amount,
            eis_monthly=allocation.eis_amount,
        )
        chargeable_income = build_annual_chargeable_income(
            allocation.gross, request.annual_reliefs, contributions, config=config
        )
        options = TaxOptions(
            apply_self_rebate=request.apply_self_rebate,
            spouse_rebate=request.spouse_rebate,
        )
        annual_tax = compute_annual_tax(chargeable_income, options, config=config)
        tax_summary = _tax_summary(chargeable_income, annual_tax, config)
        monthly_tax = annual_tax / 12

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
    _log_timings("calculate_plan", timings)

    response = PlanResponse.model_validate(
        {
            "allocation": _allocation_summary(allocation),
            "tax": tax_summary,
            "net_after_tax_monthly": round_currency(
                max(0.0, allocation.net - monthly_tax)
            ),
            "meta": _meta(config),
        }
    )
    return response.model_dump(
        mode="json", exclude={"allocation": {"meta"}, "tax": {"meta"}}
    )


__all__ = ["calculate_allocation", "calculate_income_tax", "calculate_plan"]
