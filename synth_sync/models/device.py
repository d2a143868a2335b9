"""
Data model for a device reported by the device bridge.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Device:
    """A connected device in the 'device' state."""

    serial: str
    model: str = "(unknown)"
