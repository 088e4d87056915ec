"""Tests for pin definitions and the pin registry."""

import logging

import pytest

from relay_control.config import ConfigurationError
from relay_control.hardware.gpio_abstraction import GPIO, Level, MockGPIO
from relay_control.hardware.pins import Pin, PinRegistry, build_registry


class TestPinFromConfig:
    """Tests for Pin.from_config."""

    def test_low_is_active_low(self) -> None:
        """Test that exactly "low" gives an active-low pin."""
        pin = Pin.from_config({"name": "relay1", "number": 17, "active": "low"})
        assert pin == Pin(name="relay1", number=17, active_high=False)
        assert pin.active_level == Level.LOW
        assert pin.inactive_level == Level.HIGH

    def test_high_is_active_high(self) -> None:
        """Test that "high" gives an active-high pin."""
        pin = Pin.from_config({"name": "relay1", "number": 17, "active": "high"})
        assert pin.active_high is True
        assert pin.active_level == Level.HIGH
        assert pin.inactive_level == Level.LOW

    @pytest.mark.parametrize("active", ["LOW", "Low", "", "banana", " low"])
    def test_anything_but_low_is_active_high(self, active: str) -> None:
        """Test that unrecognized polarity strings mean active-high."""
        pin = Pin.from_config({"number": 4, "active": active})
        assert pin.active_high is True

    def test_defaults(self) -> None:
        """Test that name defaults to empty and polarity to low."""
        pin = Pin.from_config({"number": 5})
        assert pin.name == ""
        assert pin.active_high is False

    def test_missing_number(self) -> None:
        """Test that a descriptor without a number is rejected."""
        with pytest.raises(ConfigurationError, match="missing 'number'"):
            Pin.from_config({"name": "relay1", "active": "low"})

    @pytest.mark.parametrize("number", ["17", 1.5, True])
    def test_non_integer_number(self, number: object) -> None:
        """Test that non-integer pin numbers are rejected."""
        with pytest.raises(ConfigurationError, match="must be an integer"):
            Pin.from_config({"number": number})

    def test_negative_number(self) -> None:
        """Test that negative pin numbers are rejected."""
        with pytest.raises(ConfigurationError, match="must not be negative"):
            Pin.from_config({"number": -1})

    def test_pin_is_immutable(self) -> None:
        """Test that pins cannot be changed after construction."""
        pin = Pin(name="relay1", number=17, active_high=False)
        with pytest.raises(AttributeError):
            pin.number = 18  # type: ignore[misc]


class TestBuildRegistry:
    """Tests for build_registry."""

    def test_opens_each_line_high(self, registry: PinRegistry, mock_gpio: MockGPIO) -> None:
        """Test that every configured line is opened as an output driven HIGH."""
        for number in (17, 27):
            state = mock_gpio.get_pin_state(number)
            assert state["mode"] == GPIO.OUT
            assert state["value"] == GPIO.HIGH

    def test_duplicate_numbers_opened_once(
        self, registry: PinRegistry, mock_gpio: MockGPIO
    ) -> None:
        """Test that a pin shared by two keys is opened a single time."""
        assert registry.line_numbers == (17, 27)
        assert mock_gpio.get_pin_state(17)["setup_count"] == 1
        assert mock_gpio.get_pin_state(27)["setup_count"] == 1

    def test_opening_issues_no_writes(self, registry: PinRegistry, mock_gpio: MockGPIO) -> None:
        """Test that building the registry only opens lines."""
        assert mock_gpio.get_output_history() == []

    def test_entries_keep_config_order(self, registry: PinRegistry) -> None:
        """Test that entries and pins keep configuration order."""
        assert [entry.key for entry in registry.entries] == ["alice", "bob"]
        assert [pin.number for pin in registry.entries[0].pins] == [17, 27]
        assert [pin.name for pin in registry.pins] == ["relay1", "porch"]

    def test_get(self, registry: PinRegistry) -> None:
        """Test looking up a registered pin by number."""
        assert registry.get(27) == Pin(name="porch", number=27, active_high=True)
        assert registry.get(99) is None

    def test_missing_key_defaults_to_empty(
        self, mock_gpio: MockGPIO, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that a group without a key gets an empty key and a warning."""
        with caplog.at_level(logging.WARNING):
            registry = build_registry([{"pins": [{"number": 5}]}], mock_gpio)

        assert registry.entries[0].key == ""
        assert "empty key" in caplog.text

    def test_group_without_pins(self, mock_gpio: MockGPIO) -> None:
        """Test that a group may have no pins."""
        registry = build_registry([{"key": "nobody"}], mock_gpio)
        assert registry.entries[0].pins == ()
        assert registry.line_numbers == ()

    def test_missing_number_fails_before_opening(self, mock_gpio: MockGPIO) -> None:
        """Test that a bad descriptor aborts before any line is opened."""
        groups = [
            {"key": "alice", "pins": [{"number": 17}]},
            {"key": "bob", "pins": [{"name": "broken"}]},
        ]
        with pytest.raises(ConfigurationError, match=r"key_pin_control\[1\]"):
            build_registry(groups, mock_gpio)

        assert mock_gpio.get_pin_state(17)["setup_count"] == 0

    def test_duplicate_key_fails_before_opening(self, mock_gpio: MockGPIO) -> None:
        """Test that a repeated key aborts before any line is opened."""
        groups = [
            {"key": "a", "pins": [{"number": 17}]},
            {"key": "a", "pins": [{"number": 27}]},
        ]
        with pytest.raises(ConfigurationError, match=r"key_pin_control\[1\] repeats") as exc_info:
            build_registry(groups, mock_gpio)

        assert "'a'" not in str(exc_info.value)
        assert mock_gpio.get_pin_state(17)["setup_count"] == 0
        assert mock_gpio.get_pin_state(27)["setup_count"] == 0

    def test_conflicting_polarity(self, mock_gpio: MockGPIO) -> None:
        """Test that one pin number cannot have two polarities."""
        groups = [
            {"key": "alice", "pins": [{"number": 17, "active": "low"}]},
            {"key": "bob", "pins": [{"number": 17, "active": "high"}]},
        ]
        with pytest.raises(ConfigurationError, match="both active-high and active-low"):
            build_registry(groups, mock_gpio)

    def test_group_must_be_mapping(self, mock_gpio: MockGPIO) -> None:
        """Test that a non-mapping group is rejected."""
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            build_registry(["alice"], mock_gpio)

    def test_pins_must_be_list(self, mock_gpio: MockGPIO) -> None:
        """Test that pins must be given as a list."""
        with pytest.raises(ConfigurationError, match="pins must be a list"):
            build_registry([{"key": "alice", "pins": {"number": 17}}], mock_gpio)

    def test_release(self, registry: PinRegistry, mock_gpio: MockGPIO) -> None:
        """Test that release cleans up every opened line."""
        registry.release()

        assert mock_gpio.get_pin_state(17)["mode"] is None
        assert mock_gpio.get_pin_state(27)["mode"] is None
