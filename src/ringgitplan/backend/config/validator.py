"""Utilities for validating year configuration data and surfacing issues.

Schema validation already rejects structurally broken files. The checks here
cover softer consistency problems worth flagging to contributors before a new
year's configuration ships.
"""

from __future__ import annotations

import argparse
from collections import Counter
from typing import Sequence

from .year_config import (
    BudgetFormula,
    DeductionSection,
    IncomeTaxConfig,
    ReliefCaps,
    YearConfiguration,
    available_years,
    load_year_configuration,
)


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_presets(presets: Sequence[BudgetFormula]) -> list[str]:
    errors: list[str] = []
    scope = "budget.presets"

    names = [preset.name for preset in presets]
    duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
    if duplicates:
        errors.append(_format_scope(scope, f"duplicate preset names: {duplicates}"))

    needs = [preset.needs_pct for preset in presets]
    repeated = sorted(value for value, count in Counter(needs).items() if count > 1)
    if repeated:
        errors.append(
            _format_scope(
                scope,
                f"presets share the same needs percentage {repeated}; only the first is reachable",
            )
        )

    for preset in presets:
        total = preset.needs_pct + preset.wants_pct + preset.savings_pct
        if abs(total - 100) > 1e-9:
            errors.append(
                _format_scope(f"{scope}.{preset.name}", f"percentages sum to {total:g}")
            )
        if preset.custom:
            errors.append(
                _format_scope(f"{scope}.{preset.name}", "presets must not be marked custom")
            )

    return errors


def _validate_deductions(section: DeductionSection) -> list[str]:
    errors: list[str] = []
    defaults = section.defaults.model_dump()

    for name, value in defaults.items():
        if value < 0:
            errors.append(_format_scope(f"deductions.defaults.{name}", "must be non-negative"))

    for name, bound in section.suggested_bounds.items():
        scope = f"deductions.suggested_bounds.{name}"
        if name not in defaults:
            errors.append(_format_scope(scope, "does not match a deduction field"))
            continue
        value = defaults[name]
        if not bound.minimum <= value <= bound.maximum:
            errors.append(
                _format_scope(
                    scope,
                    f"default {value:g} lies outside {bound.minimum:g}-{bound.maximum:g}",
                )
            )

    return errors


def _validate_reliefs(reliefs: ReliefCaps) -> list[str]:
    errors: list[str] = []
    for name, value in reliefs.model_dump().items():
        if value < 0:
            errors.append(_format_scope(f"reliefs.{name}", "must be non-negative"))
    return errors


def _validate_tax(tax: IncomeTaxConfig) -> list[str]:
    errors: list[str] = []

    boundaries = {bracket.upper_bound for bracket in tax.brackets if bracket.upper_bound}
    threshold = tax.rebates.income_threshold
    if threshold and threshold not in boundaries:
        errors.append(
            _format_scope(
                "tax.rebates.income_threshold",
                f"{threshold:g} does not coincide with a bracket boundary",
            )
        )

    rates = [bracket.rate for bracket in tax.brackets]
    if rates != sorted(rates):
        errors.append(_format_scope("tax.brackets", "marginal rates should not decrease"))

    return errors


def validate_year_configuration(config: YearConfiguration) -> list[str]:
    """Return a list of human-readable issues detected in ``config``."""

    errors: list[str] = []
    errors.extend(_validate_tax(config.tax))
    errors.extend(_validate_reliefs(config.reliefs))
    errors.extend(_validate_deductions(config.deductions))
    errors.extend(_validate_presets(config.budget.presets))
    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        config = load_year_configuration(year)
        results[int(year)] = validate_year_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate configured assessment years and report issues."
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            config = load_year_configuration(year)
        except (FileNotFoundError, ValueError) as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
