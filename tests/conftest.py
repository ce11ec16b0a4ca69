"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Make ``src`` importable when pytest runs from a checkout without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from ringgitplan.backend.app import create_app  # noqa: E402
from ringgitplan.backend.config.year_config import (  # noqa: E402
    YearConfiguration,
    load_year_configuration,
)


@pytest.fixture()
def app() -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()


@pytest.fixture()
def config_2024() -> YearConfiguration:
    """The shipped YA 2024 configuration."""

    return load_year_configuration(2024)
