"""
Downloads missing beatmaps and pushes them to the device, one at a time.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Iterable, Optional

from rich.markup import escape

from synth_sync.cli.progress_manager import ProgressManager
from synth_sync.device.adb import AdbBridge
from synth_sync.exceptions import CleanupWarning, SyncError
from synth_sync.media import Downloader
from synth_sync.models.catalog import CatalogEntry
from synth_sync.models.stats import SyncStats

log = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of a successful single-beatmap sync."""

    entry: CatalogEntry
    size: int
    cleanup_warning: Optional[CleanupWarning] = None


class SyncExecutor:
    """
    Runs download -> push -> cleanup for each missing beatmap.

    Entries are processed strictly in sequence because the bridge holds the
    only connection to the device.
    """

    def __init__(
        self,
        bridge: AdbBridge,
        downloader: Downloader,
        download_host: str,
        remote_dir: str,
        temp_dir: str,
        progress_manager: Optional[ProgressManager] = None,
        dry_run: bool = False,
    ):
        self.bridge = bridge
        self.downloader = downloader
        self.download_host = download_host.rstrip("/")
        self.remote_dir = remote_dir
        self.temp_dir = temp_dir
        self.progress_manager = progress_manager
        self.dry_run = dry_run

    def download_url(self, entry: CatalogEntry) -> str:
        locator = entry.download_locator
        if locator.startswith(("http://", "https://")):
            return locator
        if not locator.startswith("/"):
            locator = "/" + locator
        return self.download_host + locator

    def temp_path(self, entry: CatalogEntry) -> str:
        return os.path.join(self.temp_dir, os.path.basename(entry.name))

    async def sync_one(self, entry: CatalogEntry) -> SyncResult:
        """
        Downloads one beatmap to a temporary file, pushes it, and removes the file.

        Raises:
            DownloadError: If the download fails.
            TransferError: If the push to the device fails. The temporary file
                is kept in that case.
        """
        tmp_path = self.temp_path(entry)
        task_id = None
        if self.progress_manager:
            task_id = self.progress_manager.add_download_task(entry.name)

        def on_progress(done: int, total: int) -> None:
            if self.progress_manager and task_id is not None:
                self.progress_manager.update_download(task_id, done, total)

        try:
            size = await self.downloader.download_file(
                self.download_url(entry), tmp_path, on_progress
            )
        finally:
            if self.progress_manager and task_id is not None:
                self.progress_manager.remove_download_task(task_id)

        await asyncio.to_thread(self.bridge.push, tmp_path, self.remote_dir)
        log.info(f"[green]✅ Pushed {escape(entry.name)} to device at {escape(self.remote_dir)}[/green]")

        warning = await self._cleanup(tmp_path)
        return SyncResult(entry=entry, size=size, cleanup_warning=warning)

    async def _cleanup(self, path: str) -> Optional[CleanupWarning]:
        try:
            await asyncio.to_thread(os.remove, path)
        except OSError as e:
            warning = CleanupWarning(f"failed to delete temp file {path}: {e}")
            log.warning(f"[yellow]⚠️ Warning: {warning}[/yellow]")
            return warning
        return None

    async def sync_all(
        self, missing: Iterable[CatalogEntry], stats: Optional[SyncStats] = None
    ) -> SyncStats:
        """
        Syncs every entry in order. Per-entry failures are logged and counted,
        and the batch continues with the next entry.
        """
        stats = stats or SyncStats(dry_run=self.dry_run)
        entries = list(missing)

        if self.progress_manager:
            self.progress_manager.start_batch(len(entries))

        for entry in entries:
            if self.dry_run:
                log.info(f"[cyan]Would sync[/cyan] {escape(entry.name)}")
                self._advance()
                continue

            try:
                result = await self.sync_one(entry)
            except SyncError as e:
                stats.record_failure(e)
                log.error(f"[red]❌ Error processing {escape(entry.name)}: {escape(str(e))}[/red]")
            else:
                stats.record_success(result.size)
                if result.cleanup_warning:
                    stats.cleanup_warnings.append(result.cleanup_warning)
            self._advance()

        return stats

    def _advance(self) -> None:
        if self.progress_manager:
            self.progress_manager.advance_batch()
