"""Shared fixtures for avatar SDK tests."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from presence_avatars.protocol.types import CacheLevel
from presence_avatars.sdk.config import CacheConfig
from presence_avatars.sdk.transport.base import AvatarFetcher
from presence_avatars.sdk.user import User


def make_image_bytes(size: int = 512, fmt: str = "PNG", color=(100, 150, 200, 255)) -> bytes:
    """Encode a solid-colour square image."""
    mode = "RGBA" if fmt == "PNG" else "RGB"
    img = Image.new(mode, (size, size), color[: len(mode)])
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class FakeFetcher(AvatarFetcher):
    """In-memory fetch primitive recording every requested URL."""

    def __init__(self, payload: bytes = b"", error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.urls: list[str] = []
        self.connected = False
        self.disconnected = False

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnected = True

    async def fetch_bytes(self, url: str) -> bytes:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture()
def make_image():
    """Factory fixture: ``make_image(size=512, fmt="PNG")`` -> encoded bytes."""
    return make_image_bytes


@pytest.fixture()
def make_fetcher():
    """Factory fixture building a :class:`FakeFetcher`."""
    return FakeFetcher


@pytest.fixture()
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture()
def fetcher(png_bytes) -> FakeFetcher:
    return FakeFetcher(png_bytes)


@pytest.fixture()
def cache_dir(tmp_path):
    """Cache directory that does not exist yet."""
    return tmp_path / "cache"


@pytest.fixture()
def hash_config(cache_dir) -> CacheConfig:
    """Caching split by user id and avatar hash only."""
    return CacheConfig(cache_dir=cache_dir, cache_level=CacheLevel.HASH)


@pytest.fixture()
def user(sample_identity) -> User:
    return User(sample_identity)


@pytest.fixture()
def legacy_user(legacy_identity) -> User:
    return User(legacy_identity)
