"""
Tests for the HTTP client.

These tests exercise externally observable behaviour through aioresponses:
status handling, transport failures turned into status 0, JSON decoding and
the single-attempt policy.
"""

import asyncio

import aiohttp
import pytest
from aioresponses import aioresponses

from cardfusion.config.config import Config
from cardfusion.crawler.http_client import CrawlerResponse, HttpClient


@pytest.mark.unit
class TestHttpClientFetch:
    """Test fetch outcomes via the public API."""

    @pytest.mark.asyncio
    async def test_successful_fetch(self, http_client):
        with aioresponses() as m:
            m.get("https://example.com/page", status=200, body="<html>ok</html>", headers={"Content-Type": "text/html"})

            response = await http_client.fetch("https://example.com/page")

            assert response.status == 200
            assert response.ok
            assert response.body == b"<html>ok</html>"
            assert response.text() == "<html>ok</html>"
            assert response.final_url == "https://example.com/page"
            assert response.error is None
            assert response.elapsed >= 0

    @pytest.mark.asyncio
    async def test_http_error_status_returned(self, http_client):
        with aioresponses() as m:
            m.get("https://example.com/missing", status=404, body="Not Found")

            response = await http_client.fetch("https://example.com/missing")

            assert response.status == 404
            assert not response.ok

    @pytest.mark.asyncio
    async def test_server_error_not_retried(self, http_client):
        with aioresponses() as m:
            m.get("https://example.com/flaky", status=503)
            m.get("https://example.com/flaky", status=200, body="late success")

            response = await http_client.fetch("https://example.com/flaky")

            assert response.status == 503

    @pytest.mark.asyncio
    async def test_connection_error_becomes_status_zero(self, http_client):
        with aioresponses() as m:
            m.get("https://down.example.com/", exception=aiohttp.ClientConnectionError("refused"))

            response = await http_client.fetch("https://down.example.com/")

            assert response.status == 0
            assert response.error == "refused"
            assert response.body == b""

    @pytest.mark.asyncio
    async def test_timeout_becomes_status_zero(self, http_client):
        with aioresponses() as m:
            m.get("https://slow.example.com/", exception=asyncio.TimeoutError())

            response = await http_client.fetch("https://slow.example.com/", timeout=0.5)

            assert response.status == 0
            assert "Timed out" in response.error

    @pytest.mark.asyncio
    async def test_fetch_requires_initialization(self):
        client = HttpClient(Config())
        with pytest.raises(RuntimeError):
            await client.fetch("https://example.com/")

    @pytest.mark.asyncio
    async def test_context_manager_closes_session(self):
        async with HttpClient(Config()) as client:
            assert client.session is not None
        assert client.session is None


@pytest.mark.unit
class TestHttpClientJson:
    @pytest.mark.asyncio
    async def test_fetch_json(self, http_client):
        with aioresponses() as m:
            m.get("https://api.example.com/doc", status=200, payload={"title": "Doc"})

            assert await http_client.fetch_json("https://api.example.com/doc") == {"title": "Doc"}

    @pytest.mark.asyncio
    async def test_fetch_json_invalid_body(self, http_client):
        with aioresponses() as m:
            m.get("https://api.example.com/doc", status=200, body="<html>")

            assert await http_client.fetch_json("https://api.example.com/doc") is None

    @pytest.mark.asyncio
    async def test_fetch_json_error_status(self, http_client):
        with aioresponses() as m:
            m.get("https://api.example.com/doc", status=401, payload={"error": "no"})

            assert await http_client.fetch_json("https://api.example.com/doc") is None


@pytest.mark.unit
class TestCrawlerResponse:
    def make(self, body: bytes, charset=None) -> CrawlerResponse:
        return CrawlerResponse(
            status=200,
            headers={},
            body=body,
            start_ts=1.0,
            end_ts=1.5,
            url="https://example.com",
            final_url="https://example.com",
            charset=charset,
        )

    def test_declared_charset(self):
        assert self.make("café".encode("latin-1"), charset="latin-1").text() == "café"

    def test_unknown_charset_falls_back_to_utf8(self):
        assert self.make("café".encode("utf-8"), charset="no-such-codec").text() == "café"

    def test_elapsed(self):
        assert self.make(b"").elapsed == 0.5
