"""Service-layer helpers for the ringgitplan backend."""

from ringgitplan.backend.app.services.calculation_service import (
    calculate_allocation,
    calculate_income_tax,
    calculate_plan,
)

from .request_parser import parse_calculation_payload
from .response_builder import build_calculation_response, build_text_response

__all__ = [
    "build_calculation_response",
    "build_text_response",
    "calculate_allocation",
    "calculate_income_tax",
    "calculate_plan",
    "parse_calculation_payload",
]
