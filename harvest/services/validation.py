"""
Validation of raw readings received from the harvesting device.

Checks structure, presence, runtime types and physically plausible ranges,
collecting every violation rather than stopping at the first one so a caller
can report all problems at once. Canonical field names are camelCase; the
firmware's snake_case keys are accepted as aliases.

CHANGELOG:
- 2026-10-18: Reject integers too large to convert to float
- 2026-10-18: Accept firmware snake_case keys as aliases
- 2026-10-18: Initial creation

TODO:
- None
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from harvest.errors import ReadingValidationError
from harvest.models import RawReading

# ---------------------------------------------------------------------------
# Field definitions
# ---------------------------------------------------------------------------

REQUIRED_FIELDS: tuple[str, ...] = (
    "temperature",
    "humidity",
    "busVoltage",
    "current",
    "power",
    "lightValue",
    "lightStatus",
    "windCount",
    "hour",
)

NUMERIC_FIELDS: tuple[str, ...] = tuple(f for f in REQUIRED_FIELDS if f != "lightStatus")

_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "busVoltage": ("bus_voltage",),
    "lightValue": ("light_value",),
    "lightStatus": ("light_status",),
    "windCount": ("wind_count",),
    "hour": ("hr",),
}
"""Maps canonical field name -> alternative keys sent by older firmware."""

RANGES: dict[str, tuple[float, float, str]] = {
    "temperature": (-50.0, 100.0, "-50°C to 100°C"),
    "humidity": (0.0, 100.0, "0% to 100%"),
    "lightValue": (0.0, 4095.0, "0 to 4095"),
    "windCount": (0.0, 10000.0, "0 to 10000"),
    "busVoltage": (0.0, 20.0, "0V to 20V"),
    "hour": (0.0, 23.0, "0 to 23"),
}
"""Inclusive (min, max, description) bounds per field."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _lookup(raw: Mapping[str, Any], field: str) -> Any:
    """Return the value for *field* under its canonical name or an alias."""
    if raw.get(field) is not None:
        return raw[field]
    for alias in _FIELD_ALIASES.get(field, ()):
        if raw.get(alias) is not None:
            return raw[alias]
    return None


def _is_number(value: Any) -> bool:
    """Return True for finite real numbers; bools and non-finite values fail."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_reading(raw: Any) -> list[str]:
    """Validate a raw reading and return every violated constraint.

    Checks, in order: the payload is a mapping; each required field is
    present and non-null; numeric fields hold finite numbers; lightStatus is
    text. Range checks run for every numeric field independently.

    Args:
        raw: Decoded JSON body of an ingestion request.

    Returns:
        list[str]: Human-readable violations; empty when the reading is valid.
    """
    if raw is None or not isinstance(raw, Mapping):
        return ["Data must be a valid object"]

    errors: list[str] = []
    values = {field: _lookup(raw, field) for field in REQUIRED_FIELDS}

    for field in REQUIRED_FIELDS:
        if values[field] is None:
            errors.append(f"Missing required field: {field}")

    for field in NUMERIC_FIELDS:
        value = values[field]
        if value is not None and not _is_number(value):
            errors.append(f"{field} must be a valid number")

    status = values["lightStatus"]
    if status is not None and not isinstance(status, str):
        errors.append("lightStatus must be a string")

    for field, (low, high, description) in RANGES.items():
        value = values[field]
        if _is_number(value) and not low <= value <= high:
            errors.append(f"{field} out of reasonable range ({description})")

    return errors


def parse_reading(raw: Any) -> RawReading:
    """Validate a raw reading and convert it to a RawReading model.

    Args:
        raw: Decoded JSON body of an ingestion request.

    Returns:
        RawReading: The validated reading. Fractional hours are truncated.

    Raises:
        ReadingValidationError: If any constraint is violated.
    """
    violations = validate_reading(raw)
    if violations:
        raise ReadingValidationError(violations)

    values = {field: _lookup(raw, field) for field in REQUIRED_FIELDS}
    values["hour"] = int(values["hour"])
    return RawReading.model_validate(values)
