"""Pin definitions and the registry of controllable output lines.

The registry is built once from the ``key_pin_control`` configuration section.
Building it opens every distinct pin number as an output, driven HIGH, so that
no line can be written before it has been set up.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from relay_control.config.config_manager import ConfigurationError
from relay_control.hardware.gpio_abstraction import GPIO, Level

logger = logging.getLogger(__name__)

ACTIVE_LOW = "low"


@dataclass(frozen=True)
class Pin:
    """A named output line with its active polarity."""

    name: str
    number: int
    active_high: bool

    @property
    def active_level(self) -> Level:
        """Level that engages whatever is wired to the line."""
        return Level.HIGH if self.active_high else Level.LOW

    @property
    def inactive_level(self) -> Level:
        """Level that releases whatever is wired to the line."""
        return Level.LOW if self.active_high else Level.HIGH

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"name": self.name, "number": self.number, "active_high": self.active_high}

    @classmethod
    def from_config(cls, descriptor: Mapping[str, Any]) -> "Pin":
        """Build a pin from a ``{name, number, active}`` descriptor.

        Any ``active`` value other than exactly ``"low"`` means active-high.

        Raises:
            ConfigurationError: If the number is missing or not a valid line number
        """
        if not isinstance(descriptor, Mapping):
            raise ConfigurationError(f"Pin descriptor must be a mapping, got: {descriptor!r}")
        if "number" not in descriptor or descriptor["number"] is None:
            raise ConfigurationError(f"Pin descriptor is missing 'number': {dict(descriptor)}")

        number = descriptor["number"]
        if isinstance(number, bool) or not isinstance(number, int):
            raise ConfigurationError(f"Pin number must be an integer, got: {number!r}")
        if number < 0:
            raise ConfigurationError(f"Pin number must not be negative, got: {number}")

        name = descriptor.get("name")
        active = descriptor.get("active")
        return cls(
            name="" if name is None else str(name),
            number=number,
            active_high=(ACTIVE_LOW if active is None else str(active)) != ACTIVE_LOW,
        )


@dataclass(frozen=True)
class CredentialEntry:
    """A credential and the ordered pins it may control."""

    key: str
    pins: Tuple[Pin, ...]


class PinRegistry:
    """Every controllable pin, grouped by credential.

    Instances are read-only once built; use :func:`build_registry`.
    """

    def __init__(self, entries: Iterable[CredentialEntry], gpio: GPIO) -> None:
        """Initialize the registry.

        Args:
            entries: Credential entries in configuration order
            gpio: Driver the lines were opened on
        """
        self._entries: Tuple[CredentialEntry, ...] = tuple(entries)
        self._gpio = gpio

        pins: Dict[int, Pin] = {}
        for entry in self._entries:
            for pin in entry.pins:
                pins.setdefault(pin.number, pin)
        self._pins = pins

    @property
    def entries(self) -> Tuple[CredentialEntry, ...]:
        """Credential entries in configuration order."""
        return self._entries

    @property
    def pins(self) -> Tuple[Pin, ...]:
        """Distinct pins, first occurrence wins, in configuration order."""
        return tuple(self._pins.values())

    @property
    def line_numbers(self) -> Tuple[int, ...]:
        """Distinct physical line numbers in configuration order."""
        return tuple(self._pins)

    def get(self, number: int) -> Optional[Pin]:
        """Get the first-registered pin with this line number, if any."""
        return self._pins.get(number)

    def open_lines(self) -> None:
        """Open each distinct line once as an output driven HIGH."""
        for number in self._pins:
            self._gpio.setup(number, GPIO.OUT, initial=GPIO.HIGH)
            logger.debug("Opened line %d as output (initial HIGH)", number)
        logger.info("Opened %d output line(s)", len(self._pins))

    def release(self) -> None:
        """Release every line opened by this registry."""
        for number in self._pins:
            self._gpio.cleanup(number)
        logger.info("Released %d output line(s)", len(self._pins))


def _parse_group(index: int, group: Any) -> CredentialEntry:
    """Parse one ``{key, pins}`` group into a credential entry."""
    if not isinstance(group, Mapping):
        raise ConfigurationError(f"key_pin_control[{index}] must be a mapping")

    key = group.get("key")
    key = "" if key is None else str(key)
    if not key:
        logger.warning("key_pin_control[%d] has an empty key; its pins are unreachable", index)

    raw_pins = group.get("pins")
    if raw_pins is None:
        raw_pins = []
    if not isinstance(raw_pins, list):
        raise ConfigurationError(f"key_pin_control[{index}].pins must be a list")

    pins: List[Pin] = []
    for descriptor in raw_pins:
        try:
            pins.append(Pin.from_config(descriptor))
        except ConfigurationError as e:
            raise ConfigurationError(f"key_pin_control[{index}]: {e}") from e
    return CredentialEntry(key=key, pins=tuple(pins))


def _check_polarity(entries: Iterable[CredentialEntry]) -> None:
    """Reject two definitions of one line number with different polarity."""
    seen: Dict[int, Pin] = {}
    for entry in entries:
        for pin in entry.pins:
            first = seen.setdefault(pin.number, pin)
            if first.active_high != pin.active_high:
                raise ConfigurationError(
                    f"Pin {pin.number} is configured both active-high and active-low"
                )


def check_unique_keys(entries: Iterable[CredentialEntry]) -> None:
    """Reject two entries that share a credential key.

    Raises:
        ConfigurationError: Naming the group index, never the key itself
    """
    seen: Set[str] = set()
    for index, entry in enumerate(entries):
        if entry.key in seen:
            raise ConfigurationError(f"key_pin_control[{index}] repeats an earlier key")
        seen.add(entry.key)


def build_registry(groups: Iterable[Any], gpio: GPIO) -> PinRegistry:
    """Build the pin registry and open its output lines.

    Args:
        groups: ``key_pin_control`` groups, each ``{key, pins: [{name, number, active}]}``
        gpio: Driver to open the lines on

    Returns:
        Registry with every distinct line opened exactly once

    Raises:
        ConfigurationError: If a group or pin descriptor is malformed
    """
    entries = [_parse_group(index, group) for index, group in enumerate(groups)]
    _check_polarity(entries)
    check_unique_keys(entries)

    registry = PinRegistry(entries, gpio)
    registry.open_lines()
    logger.info(
        "Pin registry built: %d credential(s), %d distinct pin(s)",
        len(registry.entries),
        len(registry.line_numbers),
    )
    return registry
