"""REST endpoints for salary allocation and income tax calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, Response, request

from ringgitplan.backend.app.services.summary_service import render_plan_text
from ringgitplan.backend.services import (
    build_calculation_response,
    build_text_response,
    calculate_allocation,
    calculate_income_tax,
    calculate_plan,
    parse_calculation_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/allocations")
def create_allocation() -> tuple[Any, int]:
    """Split a monthly salary into deductions and a budget allocation."""

    payload = parse_calculation_payload(request)
    return build_calculation_response(calculate_allocation(payload))


@blueprint.post("/tax")
def create_tax_estimate() -> tuple[Any, int]:
    """Estimate annual and monthly income tax."""

    payload = parse_calculation_payload(request)
    return build_calculation_response(calculate_income_tax(payload))


@blueprint.post("/plans")
def create_plan() -> tuple[Any, int]:
    """Combine the allocation with a monthly tax estimate."""

    payload = parse_calculation_payload(request)
    return build_calculation_response(calculate_plan(payload))


@blueprint.post("/plans/summary")
def create_plan_summary() -> Response:
    """Return the combined plan as a plain-text summary.

    Pass ``?download=1`` to receive it as a file attachment.
    """

    payload = parse_calculation_payload(request)
    download = request.args.get("download", "").lower() in {"1", "true", "yes"}
    return build_text_response(render_plan_text(calculate_plan(payload)), download=download)
