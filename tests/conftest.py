"""Shared pytest fixtures for all tests."""

from typing import Any, Dict, List

import pytest

from relay_control.access import AccessResolver, build_credential_map
from relay_control.hardware import get_gpio
from relay_control.hardware.gpio_abstraction import GPIO, MockGPIO
from relay_control.hardware.pins import PinRegistry, build_registry
from relay_control.pin_controller import PinController


class RecordingSleep:
    """Stand-in for asyncio.sleep that records durations and returns at once."""

    def __init__(self, gpio: MockGPIO) -> None:
        self.calls: List[float] = []
        self.writes_before: List[int] = []
        self._gpio = gpio

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.writes_before.append(len(self._gpio.get_output_history()))


@pytest.fixture
def mock_gpio() -> MockGPIO:
    """Provide a configured MockGPIO instance for tests.

    Returns:
        MockGPIO instance with BCM mode set
    """
    gpio = get_gpio(mock=True)
    gpio.setmode(GPIO.BCM)
    assert isinstance(gpio, MockGPIO)
    return gpio


@pytest.fixture
def groups() -> List[Dict[str, Any]]:
    """Credential groups as they appear under key_pin_control."""
    return [
        {
            "key": "alice",
            "pins": [
                {"name": "relay1", "number": 17, "active": "low"},
                {"name": "porch", "number": 27, "active": "high"},
            ],
        },
        {
            "key": "bob",
            "pins": [{"name": "relay1", "number": 17, "active": "low"}],
        },
    ]


@pytest.fixture
def registry(groups: List[Dict[str, Any]], mock_gpio: MockGPIO) -> PinRegistry:
    """Registry built from the sample groups, lines opened on the mock driver."""
    return build_registry(groups, mock_gpio)


@pytest.fixture
def resolver(registry: PinRegistry) -> AccessResolver:
    """Access resolver over the sample registry."""
    return AccessResolver(build_credential_map(registry.entries))


@pytest.fixture
def recording_sleep(mock_gpio: MockGPIO) -> RecordingSleep:
    """Sleep replacement that records blink pauses."""
    return RecordingSleep(mock_gpio)


@pytest.fixture
def controller(
    resolver: AccessResolver, mock_gpio: MockGPIO, recording_sleep: RecordingSleep
) -> PinController:
    """Pin controller with history cleared after the registry opened its lines."""
    mock_gpio.clear_history()
    return PinController(resolver=resolver, gpio=mock_gpio, sleep=recording_sleep)
