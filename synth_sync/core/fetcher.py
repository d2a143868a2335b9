"""
Concurrent retrieval of every catalog page.
Fetches all pages in parallel under a concurrency limit and fails fast.
"""

import asyncio
import logging
import time
from typing import List, Optional

from synth_sync.api.client import CatalogClient
from synth_sync.models.catalog import CatalogPage

log = logging.getLogger(__name__)


class CatalogFetcher:
    """
    Fans out one fetch per catalog page and joins them into a single list.

    The returned list is in completion order, not page order. If any page
    fails, the first error is raised to the caller and no partial list is
    returned. Pages still in flight are left to finish on their own.
    """

    def __init__(self, client: CatalogClient, max_concurrent: int = 16):
        """
        Args:
            client: The CatalogClient used for every page request.
            max_concurrent: Maximum number of page requests in flight.
        """
        self.client = client
        self.semaphore = asyncio.Semaphore(max_concurrent)
        self.last_duration: float = 0.0

    async def fetch_all(self, page_count: int) -> List[CatalogPage]:
        """
        Fetches pages 1..page_count concurrently.

        Args:
            page_count: Number of pages reported by the catalog.

        Returns:
            Exactly `page_count` pages, in the order they completed.

        Raises:
            NetworkError, DecodeError: From the first page that failed.
        """
        if page_count <= 0:
            return []

        log.debug(f"Fetching {page_count} catalog pages concurrently...")
        results: List[CatalogPage] = []

        async def fetch_single(page_index: int) -> None:
            async with self.semaphore:
                page = await self.client.fetch_page(page_index)
            results.append(page)

        tasks = [fetch_single(index) for index in range(1, page_count + 1)]
        await asyncio.gather(*tasks)

        return results

    async def fetch_catalog(self, page_count: Optional[int] = None) -> List[CatalogPage]:
        """
        Fetches the whole catalog, reading the page count from page 1 unless given.
        """
        if page_count is None:
            first_page = await self.client.fetch_page(1)
            page_count = first_page.page_count
            log.info(
                f"Catalog reports [cyan]{first_page.total_count}[/cyan] beatmaps "
                f"across [cyan]{page_count}[/cyan] pages."
            )

        start_time = time.monotonic()
        pages = await self.fetch_all(page_count)
        self.last_duration = time.monotonic() - start_time

        log.info(f"Fetched {len(pages)} pages in {self.last_duration:.2f}s")
        for page in pages:
            log.debug(f"Processed page {page.page_index} with {len(page.entries)} beatmaps")
        return pages
