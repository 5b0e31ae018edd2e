"""HTTP transport shared by every remote-facing component.

Wraps a single ``httpx.AsyncClient`` and turns every transport or status
failure into :class:`TransportError`. Retries and backoff are deliberately
absent: callers that need them wrap this transport.
"""

from __future__ import annotations

import logging

import httpx

from ..config import Settings
from ..domain.errors import TransportError


logger = logging.getLogger(__name__)


class HttpTransport:
    """Async HTTP transport with the headers the static host expects."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        """Initialize transport with configuration.

        Args:
            settings: Settings instance with all configuration
            client: Pre-built client (tests inject one backed by httpx.MockTransport)
        """
        self.settings = settings
        self.client = client
        self._owns_client = client is None

    async def __aenter__(self) -> HttpTransport:
        if self.client is None:
            self.client = self._create_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _create_client(self) -> httpx.AsyncClient:
        """Create HTTP client with site headers."""
        timeout = httpx.Timeout(float(self.settings.http_timeout), connect=10.0)
        headers = {
            "User-Agent": self.settings.get_random_user_agent(),
            "Referer": self.settings.get_referer(),
            "Accept": "*/*",
            "Accept-Language": "en-US,en;q=0.5",
        }
        limits = httpx.Limits(max_connections=self.settings.max_concurrent_requests * 2)
        return httpx.AsyncClient(timeout=timeout, headers=headers, limits=limits, follow_redirects=True)

    async def aclose(self) -> None:
        """Close the client if this transport created it."""
        if self.client is not None and self._owns_client:
            await self.client.aclose()
            self.client = None

    async def get(self, url: str, *, headers: dict[str, str] | None = None) -> httpx.Response:
        """GET ``url`` and return the response, raising TransportError on failure."""
        if self.client is None:
            self.client = self._create_client()

        logger.debug("GET %s", url, extra={"request_headers": headers or {}})
        try:
            response = await self.client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"HTTP {exc.response.status_code} for {url}",
                url=url,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {url} failed: {exc}", url=url) from exc
        return response

    async def get_text(self, url: str) -> str:
        response = await self.get(url)
        return response.text

    async def get_bytes(self, url: str) -> bytes:
        response = await self.get(url)
        return response.content

    async def ranged_get(self, url: str, start: int, end: int | None = None) -> httpx.Response:
        """Issue ``Range: bytes=start-end``; ``end=None`` leaves the range open."""
        if start < 0 or (end is not None and end < start):
            raise ValueError(f"Invalid byte range {start}-{end}")
        byte_range = f"bytes={start}-{'' if end is None else end}"
        return await self.get(url, headers={"Range": byte_range})


__all__ = ["HttpTransport"]
