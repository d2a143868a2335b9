"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the core
data structures used throughout the application: catalog pages, devices,
configuration and run statistics.
"""

from .catalog import CatalogEntry, CatalogPage
from .config import SyncConfig
from .device import Device
from .stats import SyncStats

__all__ = ["CatalogEntry", "CatalogPage", "Device", "SyncConfig", "SyncStats"]
