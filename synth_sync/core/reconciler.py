"""
Set-based comparison of the catalog against a device listing.
"""

from typing import Iterable, List

from synth_sync.models.catalog import CatalogEntry, CatalogPage


def diff(
    pages: Iterable[CatalogPage],
    device_files: Iterable[str],
    dedupe: bool = False,
) -> List[CatalogEntry]:
    """
    Returns the catalog entries whose filename is not on the device.

    Pages are walked in the order given and entries in page order. A name that
    appears more than once in the catalog yields one missing entry per
    occurrence unless `dedupe` is set, in which case only the first is kept.

    Args:
        pages: Catalog pages, in any order.
        device_files: Filenames currently in the device's song folder.
        dedupe: Collapse repeated missing names to their first occurrence.
    """
    present = set(device_files)
    emitted: set[str] = set()
    missing: List[CatalogEntry] = []

    for page in pages:
        for entry in page.entries:
            if entry.name in present:
                continue
            if dedupe:
                if entry.name in emitted:
                    continue
                emitted.add(entry.name)
            missing.append(entry)

    return missing


def count_entries(pages: Iterable[CatalogPage]) -> int:
    """Total number of entry occurrences across pages."""
    return sum(len(page.entries) for page in pages)
