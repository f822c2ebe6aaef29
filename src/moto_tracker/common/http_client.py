"""Async HTTP client with a fixed timeout and raw payload caching."""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx
from fake_useragent import UserAgent

from ..errors import FetchError
from .config import Config

logger = logging.getLogger(__name__)


class AsyncHTTPClient:
    """HTTP client wrapping httpx.AsyncClient for source fetching.

    Features:
    - One attempt per call, bounded by the configured timeout
    - Random User-Agent unless one is configured
    - Raw payload caching for audit trail

    Every failure (transport error, timeout, non-2xx) is raised as FetchError.
    """

    def __init__(
        self,
        config: Config | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or Config()
        self._ua = UserAgent(fallback="Mozilla/5.0")
        self._client = httpx.AsyncClient(
            timeout=self.config.request_timeout,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def user_agent(self) -> str:
        return self.config.user_agent or self._ua.random

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        cache_key: str | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a single GET request.

        Args:
            url: Target URL.
            params: Query parameters.
            headers: Extra headers (merged with defaults).
            cache_key: Optional key for raw payload caching.
            timeout: Per-call timeout override in seconds.

        Returns:
            httpx.Response with a 2xx status.

        Raises:
            FetchError: On timeout, transport failure or non-2xx status.
        """
        merged_headers = {
            "User-Agent": self.user_agent,
            "Accept-Language": "tr-TR,tr;q=0.9,en;q=0.8",
        }
        if headers:
            merged_headers.update(headers)

        try:
            resp = await self._client.get(
                url,
                params=params,
                headers=merged_headers,
                timeout=timeout if timeout is not None else self.config.request_timeout,
            )
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FetchError(f"Timed out fetching {url}", url=url) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise FetchError(f"HTTP {status} from {url}", url=url, status_code=status) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Request to {url} failed: {exc}", url=url) from exc

        if cache_key and self.config.cache_raw_html:
            self._cache_response(cache_key, resp.text)

        return resp

    async def get_text(self, url: str, **kwargs: Any) -> str:
        """GET a URL and return the decoded body."""
        resp = await self.get(url, **kwargs)
        return resp.text

    def _cache_response(self, cache_key: str, body: str) -> Path | None:
        """Save the raw payload to the cache directory for audit.

        File naming: {cache_key}_{date}_{hash}.html
        """
        date_str = datetime.now().strftime("%Y%m%d")
        content_hash = hashlib.md5(body.encode()).hexdigest()[:8]
        safe_key = "".join(c if c.isalnum() or c in "-_" else "_" for c in cache_key)
        cache_dir = self.config.raw_html_cache_abs_dir
        path = cache_dir / f"{safe_key}_{date_str}_{content_hash}.html"
        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(body, encoding="utf-8")
        except OSError:
            logger.warning("Could not cache payload for %s", cache_key, exc_info=True)
            return None
        logger.debug("Cached payload: %s", path)
        return path

    async def aclose(self) -> None:
        """Close the underlying client."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncHTTPClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
