"""Expose configuration metadata consumed by the decoupled front-end.

These endpoints bridge the YAML-backed year configuration and the UI so that
forms can prefill statutory rates, show their suggested bounds, and display
the bracket and preset tables without duplicating them client-side.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from flask import Blueprint, jsonify

from ringgitplan.backend.app.http import NOT_FOUND, problem_response
from ringgitplan.backend.config.year_config import (
    BudgetFormula,
    YearConfiguration,
    available_years,
    load_manifest,
    load_year_configuration,
)
from ringgitplan.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    manifest = load_manifest()
    supported_years = list(manifest.supported_years)
    default_year = supported_years[-1] if supported_years else None
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": default_year,
    }


def _serialise_presets(presets: Sequence[BudgetFormula]) -> list[dict[str, Any]]:
    return [
        {
            "name": preset.name,
            "needs_pct": preset.needs_pct,
            "wants_pct": preset.wants_pct,
            "savings_pct": preset.savings_pct,
        }
        for preset in sorted(presets, key=lambda preset: preset.needs_pct)
    ]


def _serialise_bounds(bounds: Mapping[str, Any]) -> dict[str, dict[str, float]]:
    return {
        str(name): {"min": bound.minimum, "max": bound.maximum}
        for name, bound in sorted(bounds.items())
    }


def _serialise_year(config: YearConfiguration) -> dict[str, Any]:
    return {
        "year": config.year,
        "meta": dict(config.meta),
        "tax": {
            "brackets": [bracket.as_payload() for bracket in config.tax.brackets],
            "rebates": config.tax.rebates.model_dump(),
        },
        "reliefs": config.reliefs.model_dump(),
        "deductions": {
            "defaults": config.deductions.defaults.model_dump(),
            "suggested_bounds": _serialise_bounds(config.deductions.suggested_bounds),
        },
        "budget": {"presets": _serialise_presets(config.budget.presets)},
    }


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return the configured years and the default selection."""

    metadata = get_configuration_metadata()
    payload = {
        "years": [
            {"year": entry.year, "status": entry.status, "notes_url": entry.notes_url}
            for entry in load_manifest().years
        ],
        "default_year": metadata["default_year"],
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>")
def get_year_configuration(year: int) -> tuple[Any, int]:
    """Return the bracket, preset and deduction tables for ``year``."""

    years = list(available_years())
    if year not in years:
        return problem_response(
            NOT_FOUND,
            status=404,
            message=f"Configuration for year {year} not found",
            supported_years=years,
        ).to_response()

    return jsonify(_serialise_year(load_year_configuration(year))), 200


__all__ = ["blueprint", "get_configuration_metadata"]
