"""
Device Layer.

Access to the connected Android device through the adb bridge.
"""

from .adb import AdbBridge

__all__ = ["AdbBridge"]
