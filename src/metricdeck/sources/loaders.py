"""Content loaders - fetch raw metric text from URLs and local files."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

from .base import (
    JSON_CONTENT_TYPE,
    TEXT_CONTENT_TYPE,
    ContentLoader,
    LoadedContent,
    Source,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "metricdeck/0.1.0"


class LoaderError(Exception):
    """Raised when a loader cannot serve a source."""


class HttpContentLoader(ContentLoader):
    """
    Load remote sources over HTTP.

    The response ``Content-Type`` header is passed through as the content
    hint. Non-2xx responses raise ``httpx.HTTPStatusError``.

    Config:
        timeout: float - Request timeout in seconds (default: 10)
        headers: dict - Extra request headers
        transport: httpx.AsyncBaseTransport - Optional transport override
    """

    def __init__(
        self,
        timeout: float = 10.0,
        headers: Optional[dict[str, str]] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.user_agent = user_agent
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_headers(self) -> dict:
        """Get request headers."""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": f"{JSON_CONTENT_TYPE}, {TEXT_CONTENT_TYPE};q=0.9, */*;q=0.1",
            # Every cycle must observe fresh values
            "Cache-Control": "no-store",
        }
        headers.update(self.headers)
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._get_headers(),
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def load(self, source: Source) -> LoadedContent:
        if not source.is_remote:
            raise LoaderError(f"Cannot fetch local source over HTTP: {source.name}")

        client = self._get_client()
        response = await client.get(source.name)
        response.raise_for_status()

        content_type = response.headers.get("content-type", "")
        logger.debug(
            f"Fetched {len(response.content)} bytes from {source.name} "
            f"({content_type or 'no content type'})"
        )
        return LoadedContent(
            text=response.text,
            content_type=content_type,
            location=str(response.url),
        )

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


class FileContentLoader(ContentLoader):
    """
    Load local metric files.

    The file extension decides the content hint: ``.json`` files are JSON,
    everything else is exposition text. Undecodable bytes become U+FFFD.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    @staticmethod
    def content_type_for(path: str | Path) -> str:
        if str(path).lower().endswith(".json"):
            return JSON_CONTENT_TYPE
        return TEXT_CONTENT_TYPE

    async def load(self, source: Source) -> LoadedContent:
        return await self.load_path(source.name)

    async def load_path(self, path: str | Path) -> LoadedContent:
        path = Path(path)
        text = await asyncio.to_thread(path.read_text, encoding=self.encoding, errors="replace")
        return LoadedContent(
            text=text,
            content_type=self.content_type_for(path),
            location=str(path),
        )
