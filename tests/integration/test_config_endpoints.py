"""Integration tests for configuration metadata endpoints."""

from http import HTTPStatus

from flask.testing import FlaskClient

from ringgitplan.backend.config.year_config import available_years


def test_list_years_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/years")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert [entry["year"] for entry in payload["years"]] == list(available_years())
    assert payload["default_year"] == available_years()[-1]
    assert payload["years"][0]["status"] == "active"


def test_year_configuration_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/2024")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["year"] == 2024
    assert payload["meta"]["currency"] == "MYR"

    brackets = payload["tax"]["brackets"]
    assert len(brackets) == 10
    assert brackets[0] == {"lower": 0, "upper": 5000, "rate": 0.0, "base_tax": 0}
    assert brackets[-1]["upper"] is None
    assert payload["tax"]["rebates"]["income_threshold"] == 35_000

    assert payload["reliefs"] == {"epf_annual_cap": 7_000, "socso_eis_annual_cap": 350}
    assert payload["deductions"]["defaults"]["epf_rate"] == 11
    assert payload["deductions"]["suggested_bounds"]["epf_rate"] == {"min": 0, "max": 20}

    names = [preset["name"] for preset in payload["budget"]["presets"]]
    assert names == ["50/30/20", "60/20/20", "70/20/10"]


def test_unknown_year_returns_not_found(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/1999")

    assert response.status_code == HTTPStatus.NOT_FOUND
    payload = response.get_json()
    assert payload["error"] == "not_found"
    assert "1999" in payload["message"]
    assert payload["details"]["supported_years"] == list(available_years())
