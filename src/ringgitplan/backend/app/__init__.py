"""Application factory for ringgitplan backend services."""

import os
from warnings import warn

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import BadRequest

from .http import problem_for_exception
from .routes import register_routes
from .routes.config import get_configuration_metadata


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def create_app() -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)

    allowed_origins = _parse_allowed_origins(os.getenv("RINGGITPLAN_ALLOWED_ORIGINS"))

    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": sorted(allowed_origins)}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST"],
        allow_headers=["Content-Type"],
    )

    register_routes(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        payload = {"status": "ok", **get_configuration_metadata()}
        return jsonify(payload)

    @app.errorhandler(BadRequest)
    @app.errorhandler(FileNotFoundError)
    @app.errorhandler(ValueError)
    def handle_calculation_error(error: Exception):
        """Return consistent JSON problems for malformed or rejected requests."""

        return problem_for_exception(error).to_response()

    return app
