"""JSON error payloads shared by the blueprints and the app error handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from flask import jsonify
from werkzeug.exceptions import BadRequest

BAD_REQUEST = "bad_request"
VALIDATION_ERROR = "validation_error"
NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ProblemResponse:
    """An ``{"error": code, "message": ...}`` body paired with its HTTP status."""

    error: str
    status: int
    message: str | None = None
    details: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **details: Any,
) -> ProblemResponse:
    """Build a :class:`ProblemResponse`; keyword arguments land under ``details``."""

    return ProblemResponse(
        error=error, status=status, message=message, details=details or None
    )


def problem_for_exception(error: Exception) -> ProblemResponse:
    """Map an exception raised while serving a request to its error payload.

    Malformed bodies are ``bad_request``, years without configuration are
    ``not_found`` and everything else the calculators reject is a
    ``validation_error``.
    """

    if isinstance(error, BadRequest):
        return problem_response(
            BAD_REQUEST, status=400, message=error.description or "Invalid request"
        )
    if isinstance(error, FileNotFoundError):
        return problem_response(NOT_FOUND, status=404, message=str(error))
    return problem_response(VALIDATION_ERROR, status=400, message=str(error))


__all__ = [
    "BAD_REQUEST",
    "NOT_FOUND",
    "VALIDATION_ERROR",
    "ProblemResponse",
    "problem_for_exception",
    "problem_response",
]
