"""Pin controller that actuates authorized output lines.

This module provides the PinController class, which checks every request
against the AccessResolver before it issues any write to the GPIO driver.
On and off are one-shot writes. Blink is a fixed timed sequence that yields to
the event loop while it pauses.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from relay_control.access import AccessResolver
from relay_control.hardware.gpio_abstraction import GPIO, Level
from relay_control.hardware.pins import Pin

logger = logging.getLogger(__name__)

DEFAULT_BLINK_LEAD = 0.2
DEFAULT_BLINK_HOLD = 1.0


class ActuationResult(Enum):
    """Outcome of a pin operation."""

    APPLIED = "applied"  # Every write was issued
    DENIED = "denied"  # Credential may not control the pin, nothing written
    FAULT = "fault"  # Driver raised while writing


class PinController:
    """Executes on/off/blink operations for authorized callers.

    No state is kept per pin. Concurrent operations on the same pin are not
    serialized; the last write issued wins.
    """

    # pylint: disable=too-many-arguments,too-many-positional-arguments
    def __init__(
        self,
        resolver: AccessResolver,
        gpio: GPIO,
        blink_lead: float = DEFAULT_BLINK_LEAD,
        blink_hold: float = DEFAULT_BLINK_HOLD,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the pin controller.

        Args:
            resolver: Access resolver consulted before every write
            gpio: GPIO driver whose lines were opened by the pin registry
            blink_lead: Seconds the pin stays inactive before the blink pulse
            blink_hold: Seconds the pin stays active during the blink pulse
            sleep: Coroutine used to pause between blink writes
        """
        self._resolver = resolver
        self._gpio = gpio
        self._blink_lead = blink_lead
        self._blink_hold = blink_hold
        self._sleep = sleep

        logger.debug(
            "PinController initialized (blink lead=%.2fs, hold=%.2fs)", blink_lead, blink_hold
        )

    @property
    def resolver(self) -> AccessResolver:
        """Access resolver used by this controller."""
        return self._resolver

    def _authorize(self, credential: Optional[str], pin_number: int) -> Optional[Pin]:
        """Return the pin if the credential may control it, otherwise None."""
        if not self._resolver.is_accessible(credential, pin_number):
            logger.debug("Denied operation on pin %d", pin_number)
            return None
        return self._resolver.pin_by_number(credential, pin_number)

    def _write(self, pin: Pin, level: Level) -> bool:
        """Write a level to a pin, logging driver faults instead of raising.

        Returns:
            True if the driver accepted the write
        """
        try:
            self._gpio.output(pin.number, level)
        except (RuntimeError, OSError) as e:
            logger.error(
                "Failed to write %s to pin %d (%s): %s", level.name, pin.number, pin.name, e
            )
            return False
        logger.debug("Pin %d (%s) -> %s", pin.number, pin.name, level.name)
        return True

    def turn_on(self, credential: Optional[str], pin_number: int) -> ActuationResult:
        """Drive a pin to its active level.

        Args:
            credential: Caller's credential, or None
            pin_number: Physical line number

        Returns:
            Outcome of the operation
        """
        pin = self._authorize(credential, pin_number)
        if pin is None:
            return ActuationResult.DENIED

        if not self._write(pin, pin.active_level):
            return ActuationResult.FAULT
        logger.info("Pin %d (%s) turned on", pin.number, pin.name)
        return ActuationResult.APPLIED

    def turn_off(self, credential: Optional[str], pin_number: int) -> ActuationResult:
        """Drive a pin to its inactive level.

        Args:
            credential: Caller's credential, or None
            pin_number: Physical line number

        Returns:
            Outcome of the operation
        """
        pin = self._authorize(credential, pin_number)
        if pin is None:
            return ActuationResult.DENIED

        if not self._write(pin, pin.inactive_level):
            return ActuationResult.FAULT
        logger.info("Pin %d (%s) turned off", pin.number, pin.name)
        return ActuationResult.APPLIED

    async def blink(self, credential: Optional[str], pin_number: int) -> ActuationResult:
        """Pulse a pin: inactive, pause, active, pause, inactive.

        Authorization is checked once, before the first write. A driver fault
        stops the sequence at that step.

        Args:
            credential: Caller's credential, or None
            pin_number: Physical line number

        Returns:
            Outcome of the operation
        """
        pin = self._authorize(credential, pin_number)
        if pin is None:
            return ActuationResult.DENIED

        logger.info("Blinking pin %d (%s)", pin.number, pin.name)
        steps = (
            (pin.inactive_level, self._blink_lead),
            (pin.active_level, self._blink_hold),
            (pin.inactive_level, None),
        )
        for level, pause in steps:
            # Driver calls run off the event loop
            if not await asyncio.to_thread(self._write, pin, level):
                return ActuationResult.FAULT
            if pause is not None:
                await self._sleep(pause)

        logger.debug("Blink on pin %d finished", pin.number)
        return ActuationResult.APPLIED
