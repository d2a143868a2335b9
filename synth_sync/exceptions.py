"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class SynthSyncError(Exception):
    """Base exception for all application-specific errors."""


class CatalogError(SynthSyncError):
    """Base class for failures while retrieving the beatmap catalog."""


class NetworkError(CatalogError):
    """Raised when a catalog request fails to connect, times out, or is rejected."""


class DecodeError(CatalogError):
    """Raised when a catalog response is not JSON or does not match the page schema."""


class DeviceError(SynthSyncError):
    """Raised when the device bridge fails or no usable device can be selected."""


class SyncError(SynthSyncError):
    """Base class for per-beatmap sync failures. These never abort a batch."""


class DownloadError(SyncError):
    """Raised when a beatmap cannot be downloaded (transport failure or non-200)."""


class TransferError(SyncError):
    """Raised when pushing a downloaded beatmap to the device fails."""


class ConfigurationError(SynthSyncError):
    """Raised for issues related to configuration loading or validation."""


class CleanupWarning(SynthSyncError):
    """
    Describes a temporary file that could not be removed after a successful sync.
    It is recorded and logged, never raised.
    """
