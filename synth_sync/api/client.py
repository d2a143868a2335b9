"""
Async client for the SynthRiderz beatmap catalog API.
"""

import asyncio
import json
import logging
import time
from typing import Any, Optional

import aiohttp
from pydantic import ValidationError

from synth_sync.exceptions import DecodeError, NetworkError
from synth_sync.models.catalog import CatalogPage

log = logging.getLogger(__name__)


class CatalogClient:
    """
    Fetches single pages of the paginated beatmap catalog.

    Every request carries a fixed timeout. There is no retry: a failed page is
    reported to the caller as a NetworkError or DecodeError.
    """

    def __init__(
        self,
        api_endpoint: str,
        request_timeout: float = 10.0,
        max_connections: int = 16,
    ):
        """
        Initializes the catalog client.

        Args:
            api_endpoint: The catalog URL, queried as `<api_endpoint>?page=<n>`.
            request_timeout: Total seconds allowed for one page request.
            max_connections: Size of the connection pool, normally the page
                concurrency limit.
        """
        self.api_endpoint = api_endpoint
        self.request_timeout = request_timeout
        self.max_connections = max_connections
        self._session: Optional[aiohttp.ClientSession] = None

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_connections,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={
                    "User-Agent": "synth-sync",
                    "Accept": "application/json",
                    "Accept-Encoding": "gzip, deflate",
                },
                timeout=aiohttp.ClientTimeout(total=self.request_timeout),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "CatalogClient":
        await self._initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _get_json(self, page_index: int) -> Any:
        await self._initialize_session()
        start_time = time.monotonic()
        try:
            async with self._session.get(
                self.api_endpoint, params={"page": page_index}
            ) as r:
                r.raise_for_status()
                body = await r.read()
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"Request for page {page_index} timed out after "
                f"{self.request_timeout:g}s"
            ) from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Request failed for page {page_index}: {e}") from e

        duration_ms = (time.monotonic() - start_time) * 1000
        log.debug(f"Fetched catalog page {page_index} in {duration_ms:.0f} ms")

        try:
            return json.loads(body)
        except ValueError as e:
            raise DecodeError(f"JSON decode failed for page {page_index}: {e}") from e

    async def fetch_page(self, page_index: int) -> CatalogPage:
        """
        Fetches and decodes one catalog page.

        Args:
            page_index: 1-based page number.

        Raises:
            NetworkError: On connection failure, timeout or a non-2xx status.
            DecodeError: If the body is not JSON or does not match the page schema.
        """
        payload = await self._get_json(page_index)
        try:
            return CatalogPage.model_validate(payload)
        except ValidationError as e:
            raise DecodeError(
                f"Unexpected response schema for page {page_index}: "
                f"{e.error_count()} validation error(s)"
            ) from e
