"""Async HTTP access to the platforms' public pages and APIs.

Every request carries its own timeout and is tried exactly once; retry
policy belongs to whoever calls the sync layer.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

import httpx

from .common import ParseFailure, TransportError

logger = logging.getLogger(__name__)

HTML_ACCEPT_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
}


@dataclass
class PlatformTarget:
    url: str
    timeout: float = 10.0
    params: dict = field(default_factory=dict)
    html: bool = True


@dataclass
class RawPayload:
    url: str
    status_code: int
    text: str

    def json(self):
        try:
            return json.loads(self.text)
        except ValueError as e:
            raise ParseFailure(f"Invalid JSON from {self.url}: {e}") from e


class Fetcher:
    """Thin wrapper over ``httpx.AsyncClient`` used by all scrapers."""

    def __init__(self, user_agent: str, transport: httpx.AsyncBaseTransport | None = None):
        self.user_agent = user_agent
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> Fetcher:
        self._client = self._create_client()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={'User-Agent': self.user_agent},
            transport=self.transport,
            follow_redirects=True,
        )

    async def fetch(self, target: PlatformTarget) -> RawPayload:
        """GET ``target`` once, raising :class:`TransportError` on any failure."""
        if self._client is None:
            async with self:
                return await self.fetch(target)

        headers = dict(HTML_ACCEPT_HEADERS) if target.html else {}
        try:
            resp = await self._client.get(
                target.url,
                params=target.params or None,
                headers=headers,
                timeout=target.timeout,
            )
            resp.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout after {target.timeout}s fetching {target.url}")
            raise TransportError(
                f"Request to {target.url} timed out after {target.timeout}s",
                url=target.url, cause=e,
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"HTTP {status} fetching {target.url}")
            raise TransportError(
                f"Request to {target.url} failed with status code {status}",
                url=target.url, cause=e, status_code=status,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Request failed for {target.url}: {e}")
            raise TransportError(
                f"Request to {target.url} failed: {e}", url=target.url, cause=e,
            ) from e

        return RawPayload(url=str(resp.url), status_code=resp.status_code, text=resp.text)
