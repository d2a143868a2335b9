"""
Catalog API Layer.

This package handles all communication with the SynthRiderz beatmap catalog.
"""

from .client import CatalogClient

__all__ = ["CatalogClient"]
