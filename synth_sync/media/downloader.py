"""
Handles the low-level downloading of beatmap files over HTTP.
"""

import asyncio
import logging
import os
from typing import Callable, Optional

import aiofiles
import aiohttp

from synth_sync.exceptions import DownloadError

log = logging.getLogger(__name__)

_connection_pool: aiohttp.ClientSession | None = None
_pool_lock = asyncio.Lock()


async def get_connection_pool() -> aiohttp.ClientSession:
    """
    Gets or creates a shared aiohttp ClientSession for downloads.

    This function ensures that only one connection pool is created for the
    lifetime of the application run.
    """
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            return _connection_pool

        connector = aiohttp.TCPConnector(
            limit=4,
            ttl_dns_cache=600,
            keepalive_timeout=30,
            enable_cleanup_closed=True,
        )
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=15, sock_read=90)
        _connection_pool = aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers={"User-Agent": "synth-sync"},
        )
        log.debug("Created download connection pool.")

    return _connection_pool


async def close_connection_pool() -> None:
    """Closes the shared global connection pool."""
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            await _connection_pool.close()
            _connection_pool = None
            log.debug("Shared downloader connection pool closed.")


class Downloader:
    """A single-attempt file downloader that streams to disk."""

    CHUNK_SIZE = 131072  # 128 KB

    async def download_file(
        self,
        url: str,
        destination_path: str,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """
        Downloads `url` to `destination_path` and returns the number of bytes written.

        Args:
            url: Absolute URL of the file.
            destination_path: Local file to create or overwrite.
            on_progress: Called with (bytes_downloaded, total_bytes) after each chunk.
                total_bytes is 0 when the server sends no Content-Length.

        Raises:
            DownloadError: On a non-200 status or any transport failure. A
                partially written file is removed first.
        """
        name = os.path.basename(destination_path)
        try:
            session = await get_connection_pool()
            async with session.get(url, allow_redirects=True) as response:
                if response.status != 200:
                    raise DownloadError(
                        f"Download failed for {name}: status "
                        f"{response.status} {response.reason or ''}".rstrip()
                    )

                total = int(response.headers.get("Content-Length", 0) or 0)
                bytes_downloaded = 0
                async with aiofiles.open(destination_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                        await f.write(chunk)
                        bytes_downloaded += len(chunk)
                        if on_progress:
                            on_progress(bytes_downloaded, total)
                return bytes_downloaded
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            await self._discard(destination_path)
            raise DownloadError(f"Failed to download {name}: {e}") from e
        except OSError as e:
            await self._discard(destination_path)
            raise DownloadError(f"Failed to write {name}: {e}") from e

    @staticmethod
    async def _discard(path: str) -> None:
        exists = await asyncio.to_thread(os.path.isfile, path)
        if exists:
            try:
                await asyncio.to_thread(os.remove, path)
            except OSError as e:
                log.debug(f"Could not remove partial download '{path}': {e}")
