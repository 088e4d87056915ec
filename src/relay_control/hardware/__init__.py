"""Hardware abstraction layer for relay output lines."""

from .gpio_abstraction import GPIO, Level, get_gpio
from .pins import CredentialEntry, Pin, PinRegistry, build_registry

__all__ = [
    "GPIO",
    "Level",
    "get_gpio",
    "Pin",
    "CredentialEntry",
    "PinRegistry",
    "build_registry",
]
