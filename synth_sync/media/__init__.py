"""
Media Layer.

Handles downloading beatmap files.
"""

from .downloader import Downloader, close_connection_pool

__all__ = ["Downloader", "close_connection_pool"]
