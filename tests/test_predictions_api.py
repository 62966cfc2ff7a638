"""
Tests for the /v1/predictions endpoints.

CHANGELOG:
- 2026-10-18: Initial creation

TODO:
- None
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

PREDICTION_KEYS = {
    "source",
    "temperature",
    "irradiance",
    "humidity",
    "hour",
    "hourSin",
    "hourCos",
    "predictedPower",
}


class TestCurrentAndHour:
    """Tests for GET /v1/predictions/current and /hour/{hour}."""

    def test_current_prediction(self, client: TestClient) -> None:
        """The current-hour prediction is available without any reading."""
        response = client.get("/v1/predictions/current")
        assert response.status_code == 200
        body = response.json()
        assert set(body) == PREDICTION_KEYS
        assert body["predictedPower"] >= 0

    def test_current_prediction_cached(self, client: TestClient) -> None:
        """Repeated requests within the TTL return the same prediction."""
        first = client.get("/v1/predictions/current").json()
        second = client.get("/v1/predictions/current").json()
        assert first == second

    @pytest.mark.parametrize("hour", [0, 3, 18, 23])
    def test_night_hour_is_zero(self, client: TestClient, hour: int) -> None:
        """Night hours predict zero power."""
        body = client.get(f"/v1/predictions/hour/{hour}").json()
        assert body["hour"] == hour
        assert body["predictedPower"] == 0
        assert body["source"] == "model-night"

    def test_day_hour(self, client: TestClient) -> None:
        """A daytime hour predicts positive power."""
        body = client.get("/v1/predictions/hour/12").json()
        assert body["source"] == "model-prediction"
        assert body["predictedPower"] > 0

    @pytest.mark.parametrize("hour", ["24", "-1", "noon"])
    def test_invalid_hour(self, client: TestClient, hour: str) -> None:
        """Hours outside 0-23 fail request validation."""
        assert client.get(f"/v1/predictions/hour/{hour}").status_code == 422


class TestForecast:
    """Tests for GET /v1/predictions/day."""

    def test_forecast_has_24_consecutive_hours(self, client: TestClient) -> None:
        """The forecast lists 24 consecutive hours."""
        body = client.get("/v1/predictions/day").json()
        hours = [p["hour"] for p in body["forecast"]]
        assert body["source"] == "model-forecast"
        assert len(hours) == 24
        assert hours == [(hours[0] + i) % 24 for i in range(24)]


class TestCustomInputs:
    """Tests for POST /v1/predictions."""

    def test_prediction_for_inputs(self, client: TestClient) -> None:
        """Supplied conditions are echoed in the prediction."""
        response = client.post(
            "/v1/predictions",
            json={"temperature": 22.5, "humidity": 40, "lightStatus": "bright", "hour": 11},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["temperature"] == 22.5
        assert body["humidity"] == 40
        assert body["hour"] == 11
        assert 800 <= body["irradiance"] <= 1000

    def test_night_inputs(self, client: TestClient) -> None:
        """Inputs at a night hour predict zero."""
        body = client.post(
            "/v1/predictions",
            json={"temperature": 22.5, "humidity": 40, "lightStatus": "bright", "hour": 2},
        ).json()
        assert body["predictedPower"] == 0

    def test_missing_field(self, client: TestClient) -> None:
        """lightStatus is required."""
        response = client.post(
            "/v1/predictions", json={"temperature": 22.5, "humidity": 40}
        )
        assert response.status_code == 422

    def test_hour_out_of_range(self, client: TestClient) -> None:
        """An explicit hour must be 0-23."""
        response = client.post(
            "/v1/predictions",
            json={"temperature": 22.5, "humidity": 40, "lightStatus": "low", "hour": 30},
        )
        assert response.status_code == 422


class TestEngineFailure:
    """Tests for the engine failing to produce a prediction."""

    def test_missing_prediction_returns_500(self, client: TestClient) -> None:
        """A None from the engine maps to HTTP 500."""
        from harvest.api.deps import get_engine
        from harvest.api.main import app

        engine = MagicMock()
        engine.current_hour_prediction.return_value = None
        engine.day_forecast.return_value = None
        app.dependency_overrides[get_engine] = lambda: engine
        try:
            assert client.get("/v1/predictions/current").status_code == 500
            assert client.get("/v1/predictions/day").status_code == 500
        finally:
            app.dependency_overrides.clear()
