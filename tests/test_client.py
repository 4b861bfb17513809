"""Tests for the generic provider HTTP client."""

import httpx
import pytest

from routewatch.exceptions import TransportError
from routewatch.routing.client import APIClient


class TestAPIClient:
    """Tests for APIClient.execute."""

    @pytest.mark.asyncio
    async def test_get_returns_raw_response(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["headers"] = request.headers
            return httpx.Response(200, json={"ok": True})

        client = APIClient(transport=httpx.MockTransport(handler))
        response = await client.execute("get", "https://example.test/quote?a=1", headers={"x-key": "k"})

        assert response.status_code == 200
        assert response.ok
        assert b'"ok"' in response.body
        assert seen["method"] == "GET"
        assert seen["headers"]["accept"] == "application/json"
        assert seen["headers"]["x-key"] == "k"
        assert "content-type" not in seen["headers"]

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = request.content
            seen["content_type"] = request.headers.get("content-type")
            return httpx.Response(201, content=b"{}")

        client = APIClient(transport=httpx.MockTransport(handler))
        response = await client.execute("POST", "https://example.test/route", body=b'{"a": 1}')

        assert response.status_code == 201
        assert seen["body"] == b'{"a": 1}'
        assert seen["content_type"] == "application/json"

    @pytest.mark.asyncio
    async def test_error_status_is_not_raised(self):
        """Test non-2xx responses are returned for the adapter to judge."""
        client = APIClient(transport=httpx.MockTransport(lambda r: httpx.Response(500, text="boom")))
        response = await client.execute("GET", "https://example.test/")

        assert response.status_code == 500
        assert not response.ok
        assert response.text == "boom"

    @pytest.mark.asyncio
    async def test_connection_error_becomes_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = APIClient(transport=httpx.MockTransport(handler))
        with pytest.raises(TransportError, match="ConnectError"):
            await client.execute("GET", "https://example.test/")

    @pytest.mark.asyncio
    async def test_timeout_becomes_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        client = APIClient(transport=httpx.MockTransport(handler))
        with pytest.raises(TransportError, match="timed out"):
            await client.get("https://example.test/")
