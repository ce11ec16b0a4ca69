"""Unit coverage for the progressive income tax evaluator."""

from __future__ import annotations

import pytest

from ringgitplan.backend.app.models import ContributionOptions, TaxOptions
from ringgitplan.backend.app.services.calculators import (
    build_annual_chargeable_income,
    compute_annual_tax,
    estimate_monthly_tax_from_annual_chargeable,
    find_bracket,
)
from ringgitplan.backend.config.year_config import default_configuration

NO_REBATE = {"apply_self_rebate": False}


@pytest.mark.parametrize("income", [-1_000, 0, 1, 4_999.99, 5_000])
def test_income_up_to_first_bracket_is_tax_free(income: float) -> None:
    assert compute_annual_tax(income) == 0
    assert compute_annual_tax(income, NO_REBATE) == 0


def test_first_taxable_ringgit_uses_one_percent_rate() -> None:
    tax = compute_annual_tax(5_000.01, NO_REBATE)

    assert tax > 0
    assert tax == pytest.approx((5_000.01 - 5_000) * 0.01)


def test_self_rebate_absorbs_tax_at_twenty_thousand() -> None:
    assert compute_annual_tax(20_000, NO_REBATE) == pytest.approx(150)
    assert compute_annual_tax(20_000) == 0


def test_rebate_applies_at_threshold_boundary() -> None:
    assert compute_annual_tax(35_000, NO_REBATE) == pytest.approx(600)
    assert compute_annual_tax(35_000) == pytest.approx(200)


def test_rebate_not_applied_above_threshold() -> None:
    assert compute_annual_tax(35_000.01) == pytest.approx(600 + 0.01 * 0.06)


def test_spouse_rebate_stacks_with_self_rebate() -> None:
    options = TaxOptions(spouse_rebate=True)

    assert compute_annual_tax(35_000, options) == 0
    assert compute_annual_tax(30_000, {"apply_self_rebate": False, "spouse_rebate": True}) == (
        pytest.approx(150 + 10_000 * 0.03 - 400)
    )


def test_upper_bound_is_inclusive() -> None:
    assert compute_annual_tax(100_000) == pytest.approx(9_400)
    bracket = find_bracket(100_000, default_configuration().tax.brackets)
    assert bracket is not None
    assert bracket.upper_bound == 100_000


@pytest.mark.parametrize(
    ("income", "expected"),
    [
        (50_000, 1_500),
        (70_000, 3_700),
        (400_000, 84_400),
        (600_000, 136_400),
        (2_000_000, 528_400),
        (2_500_000, 528_400 + 500_000 * 0.30),
        (123_456.78, 9_400 + 23_456.78 * 0.25),
    ],
)
def test_cumulative_bracket_amounts(income: float, expected: float) -> None:
    assert compute_annual_tax(income) == pytest.approx(expected)


def test_tax_is_not_rounded() -> None:
    assert compute_annual_tax(50_000.5) == pytest.approx(1_500 + 0.5 * 0.11)
    assert compute_annual_tax(50_000.5) != round(compute_annual_tax(50_000.5), 2)


@pytest.mark.parametrize(
    "options",
    [None, NO_REBATE, {"spouse_rebate": True}, {"apply_self_rebate": False, "spouse_rebate": True}],
)
def test_tax_is_non_decreasing(options: dict[str, bool] | None) -> None:
    incomes = [step * 250.0 for step in range(0, 1_000)] + [
        35_000,
        35_000.01,
        1_000_000,
        3_000_000,
    ]
    taxes = [compute_annual_tax(income, options) for income in sorted(incomes)]

    assert all(later >= earlier for earlier, later in zip(taxes, taxes[1:]))


def test_non_numeric_income_is_treated_as_zero() -> None:
    assert compute_annual_tax("not a number") == 0
    assert compute_annual_tax(None) == 0
    assert compute_annual_tax(float("nan")) == 0


def test_numeric_strings_are_accepted() -> None:
    assert compute_annual_tax("100000") == pytest.approx(9_400)


def test_monthly_estimate_is_annual_over_twelve() -> None:
    assert estimate_monthly_tax_from_annual_chargeable(100_000) == pytest.approx(9_400 / 12)
    assert estimate_monthly_tax_from_annual_chargeable(35_000, NO_REBATE) == pytest.approx(50)


def test_chargeable_income_with_epf_below_cap() -> None:
    result = build_annual_chargeable_income(5_000, 0, {"epf_monthly": 550})

    assert result == pytest.approx(60_000 - 6_600)


def test_chargeable_income_caps_epf_relief() -> None:
    result = build_annual_chargeable_income(10_000, 0, ContributionOptions(epf_monthly=1_100))

    assert result == pytest.approx(120_000 - 7_000)


def test_chargeable_income_combines_socso_and_eis_under_one_cap() -> None:
    below_cap = build_annual_chargeable_income(
        3_000, 1_000, {"socso_monthly": 15, "eis_monthly": 6}
    )
    above_cap = build_annual_chargeable_income(
        8_000, 0, {"socso_monthly": 29.75, "eis_monthly": 11.9}
    )

    assert below_cap == pytest.approx(36_000 - 1_000 - (15 + 6) * 12)
    assert above_cap == pytest.approx(96_000 - 350)


def test_chargeable_income_single_socso_field_triggers_relief() -> None:
    result = build_annual_chargeable_income(4_000, 0, {"eis_monthly": 8})

    assert result == pytest.approx(48_000 - 96)


def test_chargeable_income_without_contributions() -> None:
    assert build_annual_chargeable_income(4_000, 9_000) == pytest.approx(39_000)


def test_chargeable_income_clamps_negatives() -> None:
    assert build_annual_chargeable_income(-4_000, 1_000) == 0
    assert build_annual_chargeable_income(4_000, -1_000) == pytest.approx(48_000)
    assert build_annual_chargeable_income(
        4_000, 0, {"epf_monthly": -200, "socso_monthly": -5}
    ) == pytest.approx(48_000)
    assert build_annual_chargeable_income(1_000, 50_000) == 0



def test_integers_beyond_float_range_are_treated_as_zero() -> None:
    assert compute_annual_tax(10**400) == 0
    assert build_annual_chargeable_income(10**400, 10**400) == 0
    assert build_annual_chargeable_income(4_000, 0, {"epf_monthly": 10**400}) == 48_000
