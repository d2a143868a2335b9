"""Shared builders and fakes for the synth-sync test suite."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from synth_sync.exceptions import DownloadError, TransferError
from synth_sync.models.catalog import CatalogEntry, CatalogPage


def make_entry(name: str) -> CatalogEntry:
    return CatalogEntry(name=name, download_locator=f"/api/beatmaps/{name}/download")


def make_page(
    page_index: int, names: Iterable[str], page_count: int = 1, total: int = 0
) -> CatalogPage:
    entries = tuple(make_entry(name) for name in names)
    return CatalogPage(
        entries=entries,
        page_index=page_index,
        page_count=page_count,
        total_count=total or len(entries),
        count=len(entries),
    )


def page_payload(page_index: int, names: Iterable[str], page_count: int) -> dict:
    """A page as the catalog API serves it."""
    data = [
        {"filename": name, "download_url": f"/api/beatmaps/{name}/download"}
        for name in names
    ]
    return {
        "data": data,
        "count": len(data),
        "total": len(data) * page_count,
        "page": page_index,
        "pageCount": page_count,
    }


class FakeCatalogClient:
    """Serves prepared pages, optionally delaying or failing some of them."""

    def __init__(
        self,
        pages: Dict[int, CatalogPage],
        delays: Optional[Dict[int, float]] = None,
        failures: Optional[Dict[int, Exception]] = None,
    ) -> None:
        self.pages = pages
        self.delays = delays or {}
        self.failures = failures or {}
        self.requested: List[int] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def __aenter__(self) -> "FakeCatalogClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def fetch_page(self, page_index: int) -> CatalogPage:
        self.requested.append(page_index)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(page_index, 0.0))
            if page_index in self.failures:
                raise self.failures[page_index]
            return self.pages[page_index]
        finally:
            self.in_flight -= 1


class FakeDownloader:
    """Writes fixed content instead of downloading; fails for chosen names."""

    def __init__(self, content: bytes = b"synth", failing: Iterable[str] = ()) -> None:
        self.content = content
        self.failing = set(failing)
        self.urls: List[str] = []

    async def download_file(self, url, destination_path, on_progress=None) -> int:
        self.urls.append(url)
        name = Path(destination_path).name
        if name in self.failing:
            raise DownloadError(f"Download failed for {name}: status 404 Not Found")
        Path(destination_path).write_bytes(self.content)
        if on_progress:
            on_progress(len(self.content), len(self.content))
        return len(self.content)


class FakeBridge:
    """Records pushes and serves a fixed folder listing."""

    def __init__(self, files: Iterable[str] = (), failing: Iterable[str] = ()) -> None:
        self.files = list(files)
        self.failing = set(failing)
        self.pushed: List[str] = []
        self.listed: List[str] = []

    def list_folder(self, path: str) -> List[str]:
        self.listed.append(path)
        return list(self.files)

    def push(self, local_path: str, remote_dir: str) -> None:
        name = Path(local_path).name
        if name in self.failing:
            raise TransferError(f"adb push failed with exit code 1\nOutput: {name}")
        self.pushed.append(name)
