"""
Tests for raw reading validation.

Validates structural checks, required fields, runtime types, range checks,
snake_case firmware aliases, and conversion to RawReading.

CHANGELOG:
- 2026-10-18: Cover integers too large for a float
- 2026-10-18: Initial creation

TODO:
- None
"""

from collections.abc import Callable

import pytest

from harvest.errors import ReadingValidationError
from harvest.services.validation import (
    REQUIRED_FIELDS,
    parse_reading,
    validate_reading,
)


class TestStructure:
    """Tests for non-object payloads."""

    @pytest.mark.parametrize("payload", [None, [], "reading", 42])
    def test_non_object_rejected_with_single_error(self, payload: object) -> None:
        """Anything but a JSON object yields exactly one structural error."""
        assert validate_reading(payload) == ["Data must be a valid object"]

    def test_valid_reading_has_no_errors(self, raw_reading: Callable[..., dict]) -> None:
        """The end-to-end example reading is valid."""
        assert validate_reading(raw_reading()) == []


class TestRequiredFields:
    """Tests for presence checks."""

    def test_empty_object_reports_every_field(self) -> None:
        """An empty object reports every required field as missing."""
        errors = validate_reading({})
        assert errors == [f"Missing required field: {f}" for f in REQUIRED_FIELDS]

    def test_null_counts_as_missing(self, raw_reading: Callable[..., dict]) -> None:
        """A null value is reported as missing, not as a type error."""
        errors = validate_reading(raw_reading(power=None))
        assert errors == ["Missing required field: power"]

    def test_zero_values_are_present(self, raw_reading: Callable[..., dict]) -> None:
        """Zero is a legitimate value, not a missing one."""
        payload = raw_reading(power=0, current=0, windCount=0, hour=0)
        assert validate_reading(payload) == []


class TestTypes:
    """Tests for runtime type checks."""

    def test_string_number_rejected(self, raw_reading: Callable[..., dict]) -> None:
        """Numeric fields must not be strings."""
        errors = validate_reading(raw_reading(temperature="30.8"))
        assert errors == ["temperature must be a valid number"]

    def test_bool_rejected_as_number(self, raw_reading: Callable[..., dict]) -> None:
        """Booleans are not accepted as numbers."""
        errors = validate_reading(raw_reading(power=True))
        assert errors == ["power must be a valid number"]

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_rejected(
        self, raw_reading: Callable[..., dict], value: float
    ) -> None:
        """NaN and infinity are not valid numbers."""
        errors = validate_reading(raw_reading(current=value))
        assert errors == ["current must be a valid number"]

    def test_oversized_integer_rejected(self, raw_reading: Callable[..., dict]) -> None:
        """Integers too large for a float are invalid rather than an error."""
        errors = validate_reading(raw_reading(power=10**400))
        assert errors == ["power must be a valid number"]

    def test_light_status_must_be_string(self, raw_reading: Callable[..., dict]) -> None:
        """lightStatus must be text."""
        errors = validate_reading(raw_reading(lightStatus=7))
        assert errors == ["lightStatus must be a string"]


class TestRanges:
    """Tests for inclusive range checks."""

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("temperature", -50),
            ("temperature", 100),
            ("humidity", 0),
            ("humidity", 100),
            ("lightValue", 4095),
            ("windCount", 10000),
            ("busVoltage", 20),
            ("hour", 23),
        ],
    )
    def test_bounds_are_inclusive(
        self, raw_reading: Callable[..., dict], field: str, value: float
    ) -> None:
        """Values exactly at a bound are accepted."""
        assert validate_reading(raw_reading(**{field: value})) == []

    def test_humidity_above_range(self, raw_reading: Callable[..., dict]) -> None:
        """Humidity above 100% is rejected with its range description."""
        errors = validate_reading(raw_reading(humidity=150))
        assert errors == ["humidity out of reasonable range (0% to 100%)"]

    def test_all_range_violations_reported(
        self, raw_reading: Callable[..., dict]
    ) -> None:
        """Hour 24 and humidity 150 are both reported, in check order."""
        errors = validate_reading(raw_reading(hour=24, humidity=150))
        assert errors == [
            "humidity out of reasonable range (0% to 100%)",
            "hour out of reasonable range (0 to 23)",
        ]

    def test_negative_temperature_below_range(
        self, raw_reading: Callable[..., dict]
    ) -> None:
        """Temperature below -50°C is rejected."""
        errors = validate_reading(raw_reading(temperature=-60))
        assert errors == ["temperature out of reasonable range (-50°C to 100°C)"]

    def test_unranged_fields_accept_any_number(
        self, raw_reading: Callable[..., dict]
    ) -> None:
        """current and power have no range check."""
        assert validate_reading(raw_reading(current=-5000, power=99999)) == []


class TestAliases:
    """Tests for snake_case firmware keys."""

    def test_firmware_keys_accepted(self) -> None:
        """bus_voltage, light_value, light_status, wind_count and hr are accepted."""
        payload = {
            "temperature": 21.0,
            "humidity": 40.0,
            "bus_voltage": 4.0,
            "current": 0.0,
            "power": 0.0,
            "light_value": 12,
            "light_status": "No light",
            "wind_count": 3,
            "hr": 22,
        }
        assert validate_reading(payload) == []
        reading = parse_reading(payload)
        assert reading.bus_voltage == 4.0
        assert reading.hour == 22

    def test_canonical_key_wins_over_alias(
        self, raw_reading: Callable[..., dict]
    ) -> None:
        """When both forms are present the camelCase key is used."""
        reading = parse_reading(raw_reading(busVoltage=5.0, bus_voltage=3.0))
        assert reading.bus_voltage == 5.0


class TestParseReading:
    """Tests for parse_reading()."""

    def test_returns_raw_reading(self, raw_reading: Callable[..., dict]) -> None:
        """A valid payload is converted to a RawReading."""
        reading = parse_reading(raw_reading())
        assert reading.power == 98.0
        assert reading.light_status == "Light available, good for solar energy"
        assert reading.hour == 14

    def test_fractional_hour_truncated(self, raw_reading: Callable[..., dict]) -> None:
        """A fractional hour is truncated toward zero."""
        assert parse_reading(raw_reading(hour=13.7)).hour == 13

    def test_invalid_raises_with_all_violations(
        self, raw_reading: Callable[..., dict]
    ) -> None:
        """Invalid readings raise ReadingValidationError listing every violation."""
        with pytest.raises(ReadingValidationError) as exc_info:
            parse_reading(raw_reading(hour=24, humidity=150))
        assert len(exc_info.value.violations) == 2
        assert "hour out of reasonable range (0 to 23)" in str(exc_info.value)
