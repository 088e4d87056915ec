"""Credential-to-pin mapping and authorization checks.

An unknown or absent credential simply has no accessible pins. Nothing here
raises for an unauthorized caller, so callers cannot tell a missing pin from a
forbidden one.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from relay_control.hardware.pins import CredentialEntry, Pin, check_unique_keys

logger = logging.getLogger(__name__)


class PinNotFoundError(LookupError):
    """Raised when a pin is looked up for a credential that cannot access it."""


def build_credential_map(entries: Iterable[CredentialEntry]) -> Mapping[str, Tuple[Pin, ...]]:
    """Map each credential key to its pins.

    Args:
        entries: Credential entries in configuration order

    Returns:
        Read-only mapping from credential to its ordered pins

    Raises:
        ConfigurationError: If two entries share a credential key
    """
    entries = list(entries)
    check_unique_keys(entries)
    credential_map: Dict[str, Tuple[Pin, ...]] = {
        entry.key: tuple(entry.pins) for entry in entries
    }
    return MappingProxyType(credential_map)


class AccessResolver:
    """Decides which pins a credential may actuate."""

    def __init__(self, credential_map: Mapping[str, Tuple[Pin, ...]]) -> None:
        """Initialize the resolver.

        Args:
            credential_map: Mapping built by :func:`build_credential_map`
        """
        self._credential_map = credential_map
        logger.debug("AccessResolver initialized with %d credential(s)", len(credential_map))

    def accessible_pins(self, credential: Optional[str]) -> Tuple[Pin, ...]:
        """Get the pins a credential may control.

        Args:
            credential: Credential presented by the caller, or None. An empty
                credential is treated like None.

        Returns:
            The credential's pins, or an empty tuple if it is unknown
        """
        if not credential:
            return ()
        return self._credential_map.get(credential, ())

    def is_accessible(self, credential: Optional[str], pin_number: int) -> bool:
        """Check whether a credential may control a pin number."""
        return any(pin.number == pin_number for pin in self.accessible_pins(credential))

    def pin_by_number(self, credential: Optional[str], pin_number: int) -> Pin:
        """Get an accessible pin by its number.

        Only call this after :meth:`is_accessible` returned True.

        Raises:
            PinNotFoundError: If the pin is not accessible with this credential
        """
        for pin in self.accessible_pins(credential):
            if pin.number == pin_number:
                return pin
        raise PinNotFoundError(f"Pin {pin_number} is not accessible with this credential")
