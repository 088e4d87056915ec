"""Relay Control: key-scoped remote control of GPIO relay pins."""

__version__ = "0.1.0"
