"""
Thin aiohttp client used by the card pipeline to fetch pages and oEmbed documents.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp
import structlog

from cardfusion.config.config import Config
from cardfusion.observability import observe

logger = structlog.get_logger(__name__)

JSON_ACCEPT = "application/json, text/javascript;q=0.9, */*;q=0.1"


@dataclass
class CrawlerResponse:
    """Response from one fetch with timing information. ``status`` is 0 when no response arrived."""

    status: int
    headers: Dict[str, str]
    body: bytes
    start_ts: float
    end_ts: float
    url: str
    final_url: str
    error: Optional[str] = None
    charset: Optional[str] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def elapsed(self) -> float:
        return self.end_ts - self.start_ts

    def text(self) -> str:
        """Body decoded with the declared charset, falling back to UTF-8."""
        encoding = self.charset or "utf-8"
        try:
            return self.body.decode(encoding, errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decoded JSON body; raises ValueError when the body is not JSON."""
        return json.loads(self.text())


class HttpClient:
    """
    One shared ``aiohttp.ClientSession`` with a fixed, conservative header set.

    Redirects are followed, every fetch runs under its own timeout and is
    attempted exactly once. Transport failures never raise: they come back
    as a ``CrawlerResponse`` with ``status=0`` and an ``error`` string.
    """

    def __init__(self, config: Config):
        self.config = config
        self.crawler_config = config.crawler
        self.session: Optional[aiohttp.ClientSession] = None
        self._is_initialized = False

    async def initialize(self) -> None:
        """Initialize the HTTP client session."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                headers=self.crawler_config.request_headers(),
                timeout=aiohttp.ClientTimeout(total=self.crawler_config.timeout),
            )
            self._is_initialized = True
            logger.debug("HTTP client session initialized", user_agent=self.crawler_config.user_agent)

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        if self.session:
            await self.session.close()
            self.session = None
        self._is_initialized = False
        logger.debug("HTTP client closed")

    async def __aenter__(self) -> "HttpClient":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def fetch(self, url: str, *, timeout: Optional[float] = None, accept: Optional[str] = None) -> CrawlerResponse:
        """
        Fetch ``url`` once.

        Args:
            url: Absolute URL to fetch
            timeout: Request timeout in seconds (None = use config default)
            accept: Override for the Accept header

        Returns:
            CrawlerResponse with status, headers, body and timing info
        """
        if not self._is_initialized or self.session is None:
            raise RuntimeError("HTTP client not initialized. Call initialize() first.")

        timeout = timeout if timeout is not None else self.crawler_config.timeout
        headers = {"Accept": accept} if accept else None
        start_time = time.time()

        try:
            async with asyncio.timeout(timeout):
                async with self.session.get(url, headers=headers, allow_redirects=True) as response:
                    body = await response.read()
                    result = CrawlerResponse(
                        status=response.status,
                        headers=dict(response.headers),
                        body=body,
                        start_ts=start_time,
                        end_ts=time.time(),
                        url=url,
                        final_url=str(response.url),
                        charset=response.charset,
                    )
        except asyncio.TimeoutError:
            logger.warning("Request timed out", url=url, timeout=timeout)
            return self._failure(url, start_time, f"Timed out after {timeout}s")
        except (aiohttp.ClientError, OSError, ValueError) as e:
            logger.warning("Request failed", url=url, error=str(e))
            return self._failure(url, start_time, str(e) or e.__class__.__name__)

        observe("fetch_latency_seconds", result.elapsed)
        logger.debug("Fetched", url=url, status=result.status, final_url=result.final_url, bytes=len(result.body))
        return result

    async def fetch_json(self, url: str, *, timeout: Optional[float] = None) -> Optional[Any]:
        """Fetch ``url`` expecting JSON; None for non-2xx responses, transport failures or invalid JSON."""
        response = await self.fetch(url, timeout=timeout, accept=JSON_ACCEPT)
        if not response.ok:
            return None
        try:
            return response.json()
        except ValueError:
            logger.debug("Response is not valid JSON", url=url)
            return None

    @staticmethod
    def _failure(url: str, start_time: float, error: str) -> CrawlerResponse:
        return CrawlerResponse(
            status=0,
            headers={},
            body=b"",
            start_ts=start_time,
            end_ts=time.time(),
            url=url,
            final_url=url,
            error=error,
        )
