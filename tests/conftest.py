"""
Shared test fixtures for the harvest test suite.

Provides a configured TestClient for FastAPI integration testing and
factories for raw and processed readings. Environment variables are reset
to memory-only defaults so the application starts without a database, and
every test runs in its own working directory so no stray ``.env`` is read.

CHANGELOG:
- 2026-10-18: Initial creation with app fixture and reading factories
"""

import logging
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from harvest.models import ConnectionQuality, ProcessedReading

E2E_READING: dict = {
    "temperature": 30.8,
    "humidity": 73.7,
    "busVoltage": 5.2,
    "current": -18.9,
    "power": 98.0,
    "lightValue": 4095,
    "lightStatus": "Light available, good for solar energy",
    "windCount": 0,
    "hour": 14,
}


@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run every test memory-only, from an empty working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DEVICE_ID", "ESP32_001")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Generator[None, None, None]:
    """Undo the JSON log handler the application lifespan installs."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture()
def raw_reading() -> Callable[..., dict]:
    """Factory for valid raw reading payloads.

    Returns:
        Callable: ``raw_reading(**overrides)`` -> dict based on the
        end-to-end example reading.
    """

    def _make(**overrides: object) -> dict:
        payload = dict(E2E_READING)
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture()
def processed_reading() -> Callable[..., ProcessedReading]:
    """Factory for ProcessedReading instances with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides: object) -> ProcessedReading:
        counter["n"] += 1
        fields: dict = {
            "id": f"reading-{counter['n']}",
            "timestamp": datetime(2026, 10, 18, 12, 0, tzinfo=UTC),
            "device_id": "ESP32_001",
            "temperature": 25.0,
            "humidity": 50.0,
            "bus_voltage": 4.2,
            "current": -10.0,
            "power": 100.0,
            "light_value": 3000.0,
            "light_status": "Light available, good for solar energy",
            "wind_count": 0.0,
            "hour": 12,
            "battery_level": 100,
            "solar_efficiency": 10.0,
            "wind_efficiency": 0.0,
            "total_efficiency": 5,
            "energy_harvested": 0.1 / 3600,
            "cost_savings": 0.1 / 3600 * 0.12,
            "carbon_offset": 0.1 / 3600 * 0.92,
            "connection_quality": ConnectionQuality.POOR,
        }
        fields.update(overrides)
        return ProcessedReading(**fields)

    return _make


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """Create a FastAPI TestClient for integration testing.

    Uses a context manager to ensure the application lifespan events
    (startup/shutdown) are properly triggered.

    Yields:
        TestClient: Configured test client for the FastAPI app.
    """
    from harvest.api.main import app

    with TestClient(app) as test_client:
        yield test_client
