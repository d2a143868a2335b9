"""End-to-end pipeline tests with fake catalog, device and downloader."""

from __future__ import annotations

import asyncio
import io

import pytest
from helpers import FakeBridge, FakeCatalogClient, FakeDownloader, make_page
from rich.console import Console

from synth_sync.core.sync_manager import SyncManager
from synth_sync.exceptions import NetworkError
from synth_sync.models.config import SyncConfig


def _config(tmp_path, **overrides) -> SyncConfig:
    return SyncConfig(temp_dir=str(tmp_path), **overrides)


def _catalog(*page_names):
    count = len(page_names)
    return {
        i: make_page(i, names, page_count=count)
        for i, names in enumerate(page_names, start=1)
    }


def test_pipeline_pushes_only_missing_beatmaps(tmp_path):
    client = FakeCatalogClient(_catalog(["a.synth", "b.synth"], ["c.synth"]))
    bridge = FakeBridge(files=["a.synth"])
    manager = SyncManager(
        _config(tmp_path), client, bridge, downloader=FakeDownloader(b"xy")
    )

    stats = asyncio.run(manager.execute_sync())

    assert bridge.listed == ["/sdcard/SynthRidersUC/CustomSongs/"]
    assert sorted(bridge.pushed) == ["b.synth", "c.synth"]
    assert stats.device_files == 1
    assert stats.catalog_pages == 2
    assert stats.catalog_entries == 3
    assert stats.missing == 2
    assert stats.synced == 2
    assert stats.bytes_downloaded == 4


def test_page_failure_aborts_before_reconciliation(tmp_path):
    client = FakeCatalogClient(
        _catalog(["a.synth"], ["b.synth"], ["c.synth"]),
        failures={2: NetworkError("Request failed for page 2: timeout")},
    )
    bridge = FakeBridge()
    downloader = FakeDownloader()
    manager = SyncManager(_config(tmp_path), client, bridge, downloader=downloader)

    with pytest.raises(NetworkError):
        asyncio.run(manager.execute_sync())

    assert manager.missing == []
    assert manager.stats.missing == 0
    assert downloader.urls == []
    assert bridge.pushed == []


def test_dedupe_setting_reaches_reconciler(tmp_path):
    client = FakeCatalogClient(_catalog(["x.synth"], ["x.synth"]))
    bridge = FakeBridge()
    manager = SyncManager(
        _config(tmp_path, dedupe_missing=True),
        client,
        bridge,
        downloader=FakeDownloader(),
    )

    stats = asyncio.run(manager.execute_sync())

    assert stats.missing == 1
    assert bridge.pushed == ["x.synth"]


def test_nothing_missing_skips_sync(tmp_path):
    client = FakeCatalogClient(_catalog(["a.synth"]))
    bridge = FakeBridge(files=["a.synth", "extra.synth"])
    downloader = FakeDownloader()
    manager = SyncManager(_config(tmp_path), client, bridge, downloader=downloader)

    stats = asyncio.run(manager.execute_sync())

    assert stats.missing == 0
    assert downloader.urls == []


def test_dry_run_reports_without_pushing(tmp_path):
    client = FakeCatalogClient(_catalog(["a.synth", "b.synth"]))
    bridge = FakeBridge()
    manager = SyncManager(
        _config(tmp_path, dry_run=True), client, bridge, downloader=FakeDownloader()
    )

    stats = asyncio.run(manager.execute_sync())

    assert stats.dry_run
    assert stats.missing == 2
    assert bridge.pushed == []


def test_missing_count_logged_only_without_console(tmp_path, caplog):
    pages = _catalog(["a.synth"])
    out = io.StringIO()

    with caplog.at_level("INFO", logger="synth_sync"):
        asyncio.run(
            SyncManager(
                _config(tmp_path, dry_run=True),
                FakeCatalogClient(pages),
                FakeBridge(),
                console=Console(file=out, width=120),
            ).execute_sync()
        )
    with_console = caplog.text
    caplog.clear()
    with caplog.at_level("INFO", logger="synth_sync"):
        asyncio.run(
            SyncManager(
                _config(tmp_path, dry_run=True), FakeCatalogClient(pages), FakeBridge()
            ).execute_sync()
        )

    assert "Missing 1 beatmaps on device" in out.getvalue()
    assert "beatmaps on device." not in with_console
    assert "beatmaps on device." in caplog.text
