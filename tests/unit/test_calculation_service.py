"""Unit tests for the calculation service entry points."""

from __future__ import annotations

import logging

import pytest

from ringgitplan.backend.app.models import AllocationRequest
from ringgitplan.backend.app.services import calculation_service
from ringgitplan.backend.app.services.calculation_service import (
    calculate_allocation,
    calculate_income_tax,
    calculate_plan,
)

_SERVICE_LOGGER = "ringgitplan.backend.app.services.calculation_service"


def test_allocation_uses_year_defaults() -> None:
    result = calculate_allocation({"year": 2024, "salary": 4_000})

    assert result["epf_amount"] == 440
    assert result["socso_amount"] == 20
    assert result["eis_amount"] == 8
    assert result["net"] == 3_532
    assert result["formula"]["name"] == "50/30/20"
    assert result["meta"] == {"year": 2024, "currency": "MYR"}


def test_allocation_applies_overrides_and_coerces_strings() -> None:
    result = calculate_allocation(
        {"salary": "5,000", "deductions": {"epf_rate": "9"}, "necessities": {"rent": "1200"}}
    )

    assert result["epf_amount"] == 450
    assert result["net"] == 4_515
    assert result["necessities_total"] == 1_200
    assert result["meta"]["year"] == 2024


def test_allocation_rounds_for_display() -> None:
    result = calculate_allocation({"salary": 3_333.33, "necessities": {"rent": 1_000}})

    for key in ("epf_amount", "net", "needs_amount", "wants_amount", "savings_amount"):
        assert result[key] == round(result[key], 2)
    assert result["necessity_pct"] == round(result["necessity_pct"], 4)


def test_allocation_accepts_request_model() -> None:
    request = AllocationRequest(salary=2_000)

    result = calculate_allocation(request)

    assert result["gross"] == 2_000


def test_allocation_rejects_unknown_fields() -> None:
    with pytest.raises(ValueError, match="deductions.bonus_rate"):
        calculate_allocation({"salary": 3_000, "deductions": {"bonus_rate": 5}})


def test_allocation_rejects_non_mapping_necessities() -> None:
    with pytest.raises(ValueError, match="Necessities section"):
        calculate_allocation({"salary": 3_000, "necessities": [100, 200]})


def test_non_mapping_payload_is_rejected() -> None:
    with pytest.raises(ValueError):
        calculate_allocation(["salary", 3_000])  # type: ignore[arg-type]


def test_unknown_year_raises_file_not_found() -> None:
    with pytest.raises(FileNotFoundError):
        calculate_allocation({"year": 1999, "salary": 3_000})


def test_tax_from_chargeable_income() -> None:
    result = calculate_income_tax({"chargeable_income": 100_000})

    assert result["annual_tax"] == 9_400
    assert result["monthly_tax"] == pytest.approx(783.33)
    assert result["effective_rate"] == pytest.approx(0.094)
    assert result["rebate_eligible"] is False
    assert result["bracket"] == {
        "lower": 70_000,
        "upper": 100_000,
        "rate": 0.19,
        "base_tax": 3_700,
    }


def test_tax_top_bracket_is_open_ended() -> None:
    result = calculate_income_tax({"chargeable_income": 3_000_000})

    assert result["bracket"]["upper"] is None
    assert result["annual_tax"] == pytest.approx(828_400)


def test_tax_from_monthly_gross_and_contributions() -> None:
    result = calculate_income_tax(
        {"monthly_gross": 5_000, "contributions": {"epf_monthly": 550}}
    )

    assert result["chargeable_income"] == 53_400
    assert result["annual_tax"] == pytest.approx(1_874)


def test_tax_rebate_switches() -> None:
    with_rebate = calculate_income_tax({"chargeable_income": 30_000})
    without_rebate = calculate_income_tax(
        {"chargeable_income": 30_000, "apply_self_rebate": False}
    )
    with_spouse = calculate_income_tax(
        {"chargeable_income": 35_000, "spouse_rebate": True}
    )

    assert with_rebate["annual_tax"] == 50
    assert with_rebate["rebate_eligible"] is True
    assert without_rebate["annual_tax"] == 450
    assert with_spouse["annual_tax"] == 0


def test_tax_negative_income_has_no_bracket() -> None:
    result = calculate_income_tax({"chargeable_income": -500})

    assert result["chargeable_income"] == 0
    assert result["annual_tax"] == 0
    assert result["effective_rate"] == 0
    assert result["bracket"] is None


def test_tax_requires_an_income() -> None:
    with pytest.raises(ValueError, match="chargeable_income or monthly_gross"):
        calculate_income_tax({"annual_reliefs": 9_000})


def test_plan_combines_allocation_and_tax() -> None:
    result = calculate_plan({"salary": 5_000, "necessities": {"rent": 2_900}})

    assert set(result) == {"allocation", "tax", "net_after_tax_monthly", "meta"}
    assert "meta" not in result["allocation"]
    assert "meta" not in result["tax"]
    assert result["meta"] == {"year": 2024, "currency": "MYR"}
    assert result["tax"]["chargeable_income"] == 53_050
    assert result["net_after_tax_monthly"] == pytest.approx(
        result["allocation"]["net"] - 1_835.5 / 12, abs=0.01
    )


def test_plan_net_after_tax_never_negative() -> None:
    result = calculate_plan({"salary": 50_000, "deductions": {"epf_rate": 100}})

    assert result["allocation"]["net"] == 0
    assert result["tax"]["annual_tax"] > 0
    assert result["net_after_tax_monthly"] == 0


def test_profiling_logs_timings(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("RINGGITPLAN_PROFILE_CALCULATIONS", "true")

    with caplog.at_level(logging.DEBUG, logger=_SERVICE_LOGGER):
        calculate_plan({"salary": 4_000})

    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("calculate_plan timings") for message in messages)


def test_profiling_disabled_by_default(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.delenv("RINGGITPLAN_PROFILE_CALCULATIONS", raising=False)

    with caplog.at_level(logging.DEBUG, logger=_SERVICE_LOGGER):
        calculate_allocation({"salary": 4_000})

    assert not any("timings" in record.getMessage() for record in caplog.records)


def test_plan_evaluates_tax_once(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[float] = []
    original = calculation_service.compute_annual_tax

    def counting(chargeable_income, options=None, *, config=None):
        calls.append(chargeable_income)
        return original(chargeable_income, options, config=config)

    monkeypatch.setattr(calculation_service, "compute_annual_tax", counting)

    result = calculate_plan({"salary": 5_000})

    assert len(calls) == 1
    assert result["tax"]["monthly_tax"] == pytest.approx(1_835.5 / 12, abs=0.01)


def test_tax_rebate_flag_strings_are_parsed() -> None:
    result = calculate_income_tax({"chargeable_income": 30_000, "apply_self_rebate": "false"})

    assert result["annual_tax"] == 450


def test_tax_rebate_flag_rejects_unreadable_value() -> None:
    with pytest.raises(ValueError, match="spouse_rebate"):
        calculate_income_tax({"chargeable_income": 30_000, "spouse_rebate": "maybe"})


def test_allocation_with_oversized_integer_salary() -> None:
    result = calculate_allocation({"salary": 10**400, "necessities": {"rent": 500}})

    assert result["gross"] == 0
    assert result["net"] == 0
