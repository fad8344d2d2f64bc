"""Abstract fetch interface for avatar downloads."""

from __future__ import annotations

import abc


class AvatarFetcher(abc.ABC):
    """Single-attempt "fetch bytes from URL" primitive.

    Implementations must raise
    :class:`~presence_avatars.protocol.errors.TransportError` for any
    network or protocol failure; they never retry.
    """

    async def connect(self) -> None:
        """Acquire any pooled resources.  Optional."""

    async def disconnect(self) -> None:
        """Release pooled resources.  Optional."""

    @abc.abstractmethod
    async def fetch_bytes(self, url: str) -> bytes:
        """Download *url* and return the response body."""

    async def __aenter__(self) -> AvatarFetcher:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect()
