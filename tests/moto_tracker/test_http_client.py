"""Tests for the async HTTP client."""

from __future__ import annotations

import httpx
import pytest

from src.moto_tracker.common.http_client import AsyncHTTPClient
from src.moto_tracker.errors import FetchError


def _transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


class TestAsyncHTTPClient:
    @pytest.mark.asyncio
    async def test_get_text(self, test_config):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["headers"] = request.headers
            return httpx.Response(200, text="<table></table>")

        async with AsyncHTTPClient(test_config, transport=_transport(handler)) as client:
            body = await client.get_text(
                "https://www.kawasaki.com.tr/Home/FiyatListesi",
                headers={"Referer": "https://www.kawasaki.com.tr"},
            )

        assert body == "<table></table>"
        assert seen["headers"]["User-Agent"] == "moto-tracker-tests/1.0"
        assert seen["headers"]["Referer"] == "https://www.kawasaki.com.tr"
        assert seen["headers"]["Accept-Language"].startswith("tr-TR")

    @pytest.mark.asyncio
    async def test_non_2xx_raises_fetch_error(self, test_config):
        transport = _transport(lambda request: httpx.Response(503, text="down"))
        async with AsyncHTTPClient(test_config, transport=transport) as client:
            with pytest.raises(FetchError) as exc_info:
                await client.get("https://tr-yamaha-motor.com/fiyat-listesi")

        assert exc_info.value.status_code == 503
        assert "HTTP 503" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_error_raises_fetch_error(self, test_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with AsyncHTTPClient(test_config, transport=_transport(handler)) as client:
            with pytest.raises(FetchError) as exc_info:
                await client.get("https://www.honda.com.tr/motorsiklet")

        assert exc_info.value.url == "https://www.honda.com.tr/motorsiklet"
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_error(self, test_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        async with AsyncHTTPClient(test_config, transport=_transport(handler)) as client:
            with pytest.raises(FetchError, match="Timed out"):
                await client.get("https://www.borusanotomotiv.com/motorrad")

    @pytest.mark.asyncio
    async def test_single_attempt(self, test_config):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url)
            return httpx.Response(500)

        async with AsyncHTTPClient(test_config, transport=_transport(handler)) as client:
            with pytest.raises(FetchError):
                await client.get("https://www.kawasaki.com.tr/Home/FiyatListesi")

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_caches_raw_payload(self, test_config):
        test_config.cache_raw_html = True
        transport = _transport(lambda request: httpx.Response(200, text="<html>ok</html>"))

        async with AsyncHTTPClient(test_config, transport=transport) as client:
            await client.get("https://www.kawasaki.com.tr", cache_key="kawasaki")

        cached = list(test_config.raw_html_cache_abs_dir.glob("kawasaki_*.html"))
        assert len(cached) == 1
        assert cached[0].read_text(encoding="utf-8") == "<html>ok</html>"

    @pytest.mark.asyncio
    async def test_no_cache_without_key(self, test_config):
        test_config.cache_raw_html = True
        transport = _transport(lambda request: httpx.Response(200, text="ok"))

        async with AsyncHTTPClient(test_config, transport=transport) as client:
            await client.get("https://www.kawasaki.com.tr")

        assert not test_config.raw_html_cache_abs_dir.exists()
