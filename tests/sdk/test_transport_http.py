"""Tests for HTTPFetcher using httpx's in-process MockTransport."""

from __future__ import annotations

import httpx
import pytest

from presence_avatars.protocol.errors import TransportError
from presence_avatars.protocol.types import CacheLevel
from presence_avatars.sdk.config import CacheConfig
from presence_avatars.sdk.resolver import AvatarResolver, AvatarStatus
from presence_avatars.sdk.transport.http import HTTPFetcher
from presence_avatars.sdk.user import User


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHTTPFetcher:
    async def test_returns_body(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, content=b"image-bytes")

        async with HTTPFetcher(client=_mock_client(handler)) as fetcher:
            data = await fetcher.fetch_bytes("https://cdn.example.com/avatars/1/abc.png?size=512")

        assert data == b"image-bytes"
        assert seen == ["https://cdn.example.com/avatars/1/abc.png?size=512"]

    async def test_http_error_status(self):
        fetcher = HTTPFetcher(client=_mock_client(lambda request: httpx.Response(404)))
        with pytest.raises(TransportError, match="HTTP 404"):
            await fetcher.fetch_bytes("https://cdn.example.com/avatars/1/gone.png")

    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = HTTPFetcher(client=_mock_client(handler))
        with pytest.raises(TransportError, match="ConnectError"):
            await fetcher.fetch_bytes("https://cdn.example.com/avatars/1/abc.png")

    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        fetcher = HTTPFetcher(client=_mock_client(handler))
        with pytest.raises(TransportError, match="ReadTimeout"):
            await fetcher.fetch_bytes("https://cdn.example.com/avatars/1/abc.png")

    async def test_invalid_url(self):
        fetcher = HTTPFetcher(client=_mock_client(lambda request: httpx.Response(200)))
        with pytest.raises(TransportError, match="InvalidURL"):
            await fetcher.fetch_bytes("https://bad host:xx/avatars/1/abc.png?size=512")

    async def test_injected_client_not_closed(self):
        client = _mock_client(lambda request: httpx.Response(200))
        fetcher = HTTPFetcher(client=client)
        await fetcher.disconnect()
        assert not client.is_closed
        await client.aclose()

    async def test_owned_client_lifecycle(self):
        fetcher = HTTPFetcher(timeout=5.0)
        await fetcher.connect()
        assert fetcher._client is not None
        await fetcher.disconnect()
        assert fetcher._client is None


class TestResolverOverHTTP:
    """End-to-end resolution through a mocked CDN."""

    async def test_resolver_fetches_via_httpx(self, tmp_path, png_bytes, sample_identity, sample_id):
        requests = []

        def cdn(request: httpx.Request) -> httpx.Response:
            requests.append(request.url)
            if request.url.path == f"/avatars/{sample_id}/abc.png":
                return httpx.Response(200, content=png_bytes)
            return httpx.Response(404)

        config = CacheConfig(cache_dir=tmp_path / "cache", cache_level=CacheLevel.HASH)
        async with AvatarResolver(config, HTTPFetcher(client=_mock_client(cdn))) as resolver:
            result = await resolver.resolve_avatar(User(sample_identity), 128)

        assert result.status is AvatarStatus.FETCHED
        assert requests[0].params["size"] == "512"
        assert result.path.read_bytes() == png_bytes

    async def test_resolver_survives_cdn_outage(self, tmp_path, sample_identity):
        config = CacheConfig(cache_dir=tmp_path / "cache", cache_level=CacheLevel.HASH)
        fetcher = HTTPFetcher(client=_mock_client(lambda request: httpx.Response(502)))
        result = await AvatarResolver(config, fetcher).resolve_avatar(User(sample_identity), 128)

        assert result.status is AvatarStatus.FETCH_FAILED
        assert "HTTP 502" in result.reason
