"""
The main orchestrator for one sync run: list the device, fetch the catalog,
reconcile, and push whatever is missing.
"""

import asyncio
import logging
import time
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from synth_sync.api.client import CatalogClient
from synth_sync.cli.formatters import print_missing_table
from synth_sync.cli.progress_manager import ProgressManager
from synth_sync.device.adb import AdbBridge
from synth_sync.media import Downloader
from synth_sync.models.catalog import CatalogEntry, CatalogPage
from synth_sync.models.config import SyncConfig
from synth_sync.models.stats import SyncStats

from . import reconciler
from .fetcher import CatalogFetcher
from .sync_executor import SyncExecutor

log = logging.getLogger(__name__)


class SyncManager:
    """Orchestrates the entire sync process for a single device."""

    def __init__(
        self,
        config: SyncConfig,
        client: CatalogClient,
        bridge: AdbBridge,
        progress_manager: Optional[ProgressManager] = None,
        downloader: Optional[Downloader] = None,
        console: Optional[Console] = None,
    ):
        self.config = config
        self.console = console
        self.bridge = bridge
        self.stats = SyncStats(dry_run=config.dry_run)
        self.fetcher = CatalogFetcher(client, max_concurrent=config.max_concurrent_pages)
        self.executor = SyncExecutor(
            bridge,
            downloader or Downloader(),
            download_host=config.download_host,
            remote_dir=config.remote_dir,
            temp_dir=config.resolved_temp_dir,
            progress_manager=progress_manager,
            dry_run=config.dry_run,
        )
        self.missing: List[CatalogEntry] = []

    async def list_device_files(self) -> List[str]:
        files = await asyncio.to_thread(self.bridge.list_folder, self.config.remote_dir)
        self.stats.device_files = len(files)
        log.info(f"Found [cyan]{len(files)}[/cyan] files in {self.config.remote_dir}")
        return files

    async def fetch_catalog(self) -> List[CatalogPage]:
        start_time = time.monotonic()
        pages = await self.fetcher.fetch_catalog()
        self.stats.catalog_fetch_seconds = time.monotonic() - start_time
        self.stats.catalog_pages = len(pages)
        self.stats.catalog_entries = reconciler.count_entries(pages)
        return pages

    def reconcile(self, pages: List[CatalogPage], device_files: List[str]) -> List[CatalogEntry]:
        self.missing = reconciler.diff(
            pages, device_files, dedupe=self.config.dedupe_missing
        )
        self.stats.missing = len(self.missing)
        self._report_missing()
        return self.missing

    def _report_missing(self) -> None:
        if not self.missing:
            log.info("[green]All beatmaps are present on the device.[/green]")
            return
        if self.console:
            print_missing_table(self.console, self.missing)
        else:
            log.info(f"Missing [bold]{len(self.missing)}[/bold] beatmaps on device.")
        for entry in self.missing:
            log.debug(f"  {escape(entry.name)} ({escape(entry.download_locator)})")

    async def execute_sync(self) -> SyncStats:
        """
        Runs the full pipeline and returns the run statistics.

        Catalog errors propagate before anything is reconciled or pushed.
        Per-beatmap errors are counted in the returned stats.
        """
        device_files = await self.list_device_files()
        pages = await self.fetch_catalog()
        missing = self.reconcile(pages, device_files)
        if missing:
            await self.executor.sync_all(missing, self.stats)
        return self.stats
