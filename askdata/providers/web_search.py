"""Web reader and search over the Jina endpoints."""

from typing import Optional
from urllib.parse import quote

import httpx

from ..utils.logger import get_logger
from .base import WebSearch


class JinaWebSearch(WebSearch):
    """Fetches readable pages and search results as text.

    The page URL is appended to the reader endpoint as is; the search query
    is percent-encoded into a single path segment.
    """

    def __init__(
        self,
        reader_url: str = "https://r.jina.ai",
        search_url: str = "https://s.jina.ai",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.reader_url = reader_url.rstrip("/")
        self.search_url = search_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.logger = get_logger("providers.web_search")

    async def _get(self, url: str) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(url)
            response.raise_for_status()
            self.logger.debug(f"Fetched {len(response.text)} characters from {url}")
            return response.text

    async def read(self, url: str) -> str:
        return await self._get(f"{self.reader_url}/{url}")

    async def search(self, query: str) -> str:
        return await self._get(f"{self.search_url}/{quote(query, safe='')}")
