"""HTTP avatar fetcher via httpx with connection pooling."""

from __future__ import annotations

import httpx

from presence_avatars.protocol.errors import TransportError
from presence_avatars.sdk.transport.base import AvatarFetcher

_DEFAULT_TIMEOUT = 30.0


class HTTPFetcher(AvatarFetcher):
    """Fetch avatar bytes with an httpx ``AsyncClient``.

    A single client is created in ``connect()`` (or lazily on the first
    fetch) and reused for all requests.  Call ``disconnect()`` to close
    it.  A client passed to the constructor is used as-is and is not
    closed by ``disconnect()``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    async def connect(self) -> None:
        """Create the shared httpx AsyncClient."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
            )
            self._owns_client = True

    async def disconnect(self) -> None:
        """Close the httpx client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_bytes(self, url: str) -> bytes:
        """GET *url* and return the body.

        Raises ``TransportError`` on malformed URLs, connection failures,
        timeouts and 4xx/5xx responses.
        """
        if self._client is None:
            await self.connect()
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"HTTP {exc.response.status_code} fetching {url}"
            ) from exc
        # InvalidURL does not derive from HTTPError
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(
                f"{type(exc).__name__} fetching {url}: {exc}"
            ) from exc
        return resp.content
