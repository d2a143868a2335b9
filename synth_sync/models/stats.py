"""
Dataclass for tracking sync session statistics.
"""

from dataclasses import dataclass, field

from synth_sync.exceptions import CleanupWarning, SyncError


@dataclass
class SyncStats:
    """Tracks what happened during one sync run."""

    device_files: int = 0
    catalog_pages: int = 0
    catalog_entries: int = 0
    missing: int = 0
    synced: int = 0
    failed: int = 0
    bytes_downloaded: int = 0
    catalog_fetch_seconds: float = 0.0
    dry_run: bool = False
    errors: list[SyncError] = field(default_factory=list, repr=False)
    cleanup_warnings: list[CleanupWarning] = field(default_factory=list, repr=False)

    def record_success(self, size: int) -> None:
        self.synced += 1
        self.bytes_downloaded += size

    def record_failure(self, error: SyncError) -> None:
        self.failed += 1
        self.errors.append(error)
