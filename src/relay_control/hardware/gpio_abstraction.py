"""GPIO abstraction layer supporting both real hardware and mocking."""

import logging
import threading
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple


logger = logging.getLogger(__name__)


class PinMode(IntEnum):
    """GPIO pin modes. Only outputs are driven."""

    OUT = 1


class Level(IntEnum):
    """Logic levels for an output line."""

    LOW = 0
    HIGH = 1


class GPIO(ABC):
    """Abstract base class for GPIO output operations."""

    # Constants for compatibility with RPi.GPIO
    BCM = "BCM"
    BOARD = "BOARD"
    OUT = PinMode.OUT
    HIGH = Level.HIGH
    LOW = Level.LOW

    @abstractmethod
    def setmode(self, mode: str) -> None:
        """Set the pin numbering mode (BCM or BOARD)."""

    @abstractmethod
    def setup(self, pin: int, mode: PinMode, initial: Level = Level.LOW) -> None:
        """Set up a GPIO pin, driving outputs to ``initial`` straight away."""

    @abstractmethod
    def output(self, pin: int, value: Level) -> None:
        """Set the value of a GPIO pin."""

    @abstractmethod
    def cleanup(self, pin: Optional[int] = None) -> None:
        """Clean up GPIO resources."""

    @abstractmethod
    def setwarnings(self, enable: bool) -> None:
        """Enable or disable warnings."""


class MockGPIO(GPIO):
    """Mock GPIO implementation for running without hardware."""

    def __init__(self) -> None:
        """Initialize mock GPIO."""
        self._mode: Optional[str] = None
        self._pin_modes: Dict[int, PinMode] = {}
        self._pin_values: Dict[int, Level] = {}
        self._setup_counts: Dict[int, int] = {}
        self._history: List[Tuple[int, Level]] = []
        self._warnings_enabled = True
        self._lock = threading.Lock()
        logger.info("MockGPIO initialized - no hardware required")

    def setmode(self, mode: str) -> None:
        """Set the pin numbering mode."""
        if mode not in (self.BCM, self.BOARD):
            raise ValueError(f"Invalid mode: {mode}")
        self._mode = mode
        logger.debug("GPIO mode set to: %s", mode)

    def setup(self, pin: int, mode: PinMode, initial: Level = Level.LOW) -> None:
        """Set up a GPIO pin."""
        with self._lock:
            if pin in self._pin_modes and self._warnings_enabled:
                logger.warning("Pin %d is already set up", pin)
            self._pin_modes[pin] = mode
            self._pin_values[pin] = Level(initial)
            self._setup_counts[pin] = self._setup_counts.get(pin, 0) + 1

            logger.debug("Pin %d setup: mode=%s, initial=%s", pin, mode.name, Level(initial).name)

    def output(self, pin: int, value: Level) -> None:
        """Set the value of a GPIO pin."""
        with self._lock:
            if pin not in self._pin_modes:
                raise RuntimeError(f"Pin {pin} not set up")

            old_value = self._pin_values.get(pin, Level.LOW)
            self._pin_values[pin] = Level(value)
            self._history.append((pin, Level(value)))

            logger.debug("Pin %d output: %d -> %d", pin, old_value, value)

    def cleanup(self, pin: Optional[int] = None) -> None:
        """Clean up GPIO resources."""
        with self._lock:
            if pin is None:
                self._pin_modes.clear()
                self._pin_values.clear()
                logger.debug("All GPIO pins cleaned up")
            else:
                self._pin_modes.pop(pin, None)
                self._pin_values.pop(pin, None)
                logger.debug("Pin %d cleaned up", pin)

    def setwarnings(self, enable: bool) -> None:
        """Enable or disable warnings."""
        self._warnings_enabled = enable

    # Mock-specific methods for testing

    def get_pin_state(self, pin: int) -> Dict[str, Any]:
        """Get the current state of a pin (for testing)."""
        with self._lock:
            return {
                "mode": self._pin_modes.get(pin),
                "value": self._pin_values.get(pin),
                "setup_count": self._setup_counts.get(pin, 0),
            }

    def get_output_history(self, pin: Optional[int] = None) -> List[Tuple[int, Level]]:
        """Get every write issued so far, oldest first (for testing).

        Args:
            pin: If given, only writes to this pin are returned
        """
        with self._lock:
            if pin is None:
                return list(self._history)
            return [entry for entry in self._history if entry[0] == pin]

    def clear_history(self) -> None:
        """Forget recorded writes (for testing)."""
        with self._lock:
            self._history.clear()


class RealGPIO(GPIO):
    """Real GPIO implementation using RPi.GPIO."""

    def __init__(self) -> None:
        """Initialize real GPIO using RPi.GPIO."""
        try:
            import RPi.GPIO as gpio  # type: ignore  # pylint: disable=import-outside-toplevel

            self._gpio = gpio
            logger.info("Real GPIO initialized using RPi.GPIO")
        except ImportError as e:
            raise RuntimeError("RPi.GPIO not available. Install it or use mock GPIO mode.") from e

    def setmode(self, mode: str) -> None:
        """Set the pin numbering mode."""
        self._gpio.setmode(getattr(self._gpio, mode))

    def setup(self, pin: int, mode: PinMode, initial: Level = Level.LOW) -> None:
        """Set up a GPIO pin."""
        gpio_initial = self._gpio.HIGH if initial == Level.HIGH else self._gpio.LOW
        self._gpio.setup(pin, self._gpio.OUT, initial=gpio_initial)

    def output(self, pin: int, value: Level) -> None:
        """Set the value of a GPIO pin."""
        self._gpio.output(pin, self._gpio.HIGH if value == Level.HIGH else self._gpio.LOW)

    def cleanup(self, pin: Optional[int] = None) -> None:
        """Clean up GPIO resources."""
        if pin is None:
            self._gpio.cleanup()
        else:
            self._gpio.cleanup(pin)

    def setwarnings(self, enable: bool) -> None:
        """Enable or disable warnings."""
        self._gpio.setwarnings(enable)


def get_gpio(mock: bool) -> GPIO:
    """Get the appropriate GPIO implementation.

    Args:
        mock: If True, use mock GPIO. If False, use real GPIO.

    Returns:
        GPIO implementation (MockGPIO or RealGPIO)
    """
    if mock:
        return MockGPIO()
    return RealGPIO()
