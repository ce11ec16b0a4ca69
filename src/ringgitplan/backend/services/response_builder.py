"""Utilities for serialising calculation responses."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Tuple

from flask import Response, jsonify

ResponseTuple = Tuple[Any, int]

SUMMARY_FILENAME = "ringgitplan-summary.txt"


def build_calculation_response(payload: Mapping[str, Any]) -> ResponseTuple:
    """Return a Flask JSON response for the calculation ``payload``."""

    return jsonify(payload), 200


def build_text_response(text: str, *, download: bool = False) -> Response:
    """Return ``text`` as a UTF-8 plain-text response.

    With ``download`` set the summary is offered as a file attachment.
    """

    response = Response(text, status=200, mimetype="text/plain; charset=utf-8")
    if download:
        response.headers["Content-Disposition"] = f"attachment; filename={SUMMARY_FILENAME}"
    return response
