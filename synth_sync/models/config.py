"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

import tempfile

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_API_ENDPOINT = "https://synthriderz.com/api/beatmaps"
DEFAULT_DOWNLOAD_HOST = "https://synthriderz.com"
DEFAULT_REMOTE_DIR = "/sdcard/SynthRidersUC/CustomSongs/"


class SyncConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Catalog & downloads
    api_endpoint: str = DEFAULT_API_ENDPOINT
    download_host: str = DEFAULT_DOWNLOAD_HOST
    request_timeout: float = 10.0
    max_concurrent_pages: int = 16
    temp_dir: str = ""

    # Device
    remote_dir: str = DEFAULT_REMOTE_DIR
    adb_path: str = "adb"
    adb_port: int = 5037

    # Behaviour
    dedupe_missing: bool = False
    dry_run: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    @field_validator("api_endpoint", "download_host")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensures catalog URLs are absolute HTTP(S) URLs."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Expected an http(s) URL, got: {v!r}")
        return v.rstrip("/")

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Request timeout must be greater than zero.")
        return v

    @field_validator("max_concurrent_pages")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of concurrent page fetches."""
        if v < 1 or v > 64:
            raise ValueError("Max concurrent pages must be between 1 and 64.")
        return v

    @field_validator("adb_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"adb_port must be a valid TCP port, got: {v}")
        return v

    @field_validator("remote_dir")
    @classmethod
    def validate_remote_dir(cls, v: str) -> str:
        """The push target must be an absolute directory path on the device."""
        if not v.startswith("/"):
            raise ValueError(f"remote_dir must be an absolute device path, got: {v}")
        return v if v.endswith("/") else v + "/"

    @property
    def resolved_temp_dir(self) -> str:
        """The directory used for temporary downloads."""
        return self.temp_dir or tempfile.gettempdir()

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path", "dry_run"}
        return {key for key in cls.model_fields if key not in internal_fields}
