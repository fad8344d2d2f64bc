"""Avatar resolution: memory, then disk cache, then CDN.

Each call is one coroutine with a single suspension point, the network
fetch.  Concurrent calls for the same user are not de-duplicated; both
miss the cache, both fetch and both write the same file, which converges
to the same content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from PIL import Image

from presence_avatars.protocol.cache_key import (
    CacheKey,
    default_cache_key,
    resolve_cache_key,
)
from presence_avatars.protocol.default_avatar import default_avatar_index
from presence_avatars.protocol.errors import CacheWriteError, DecodeError, TransportError
from presence_avatars.protocol.identity import avatar_url, default_avatar_url
from presence_avatars.protocol.types import AvatarFormat, AvatarSize
from presence_avatars.sdk._sync import run_sync
from presence_avatars.sdk.config import REFRESH_RECHECK_HASH, CacheConfig
from presence_avatars.sdk.image import decode_image, placeholder_image
from presence_avatars.sdk.store import AvatarStore
from presence_avatars.sdk.transport import AvatarFetcher, HTTPFetcher
from presence_avatars.sdk.user import User

logger = logging.getLogger(__name__)

AvatarCallback = Callable[[User, Image.Image], None]


class AvatarStatus(str, Enum):
    """How a resolution call ended."""

    MEMORY = "memory"
    CACHE_HIT = "cache-hit"
    FETCHED = "fetched"
    FETCH_FAILED = "fetch-failed"
    DECODE_FAILED = "decode-failed"


_SUCCESS = {AvatarStatus.MEMORY, AvatarStatus.CACHE_HIT, AvatarStatus.FETCHED}


@dataclass(frozen=True)
class AvatarResult:
    """Outcome of one resolution call.

    ``image`` is always set: the resolved avatar on success, the user's
    previous avatar or a blank placeholder on failure.
    """

    status: AvatarStatus
    image: Image.Image
    size: AvatarSize
    format: AvatarFormat
    path: Optional[Path] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in _SUCCESS


class AvatarResolver:
    """Resolve user avatars through an optional on-disk cache.

    Failures (network, corrupt bytes, unwritable cache) are logged and
    reported through :class:`AvatarResult`; they are never raised, and
    the completion callback fires exactly once per call.  An unknown
    avatar size is a caller error and raises ``ValueError`` up front.

    The config is read on every call, so changes to a shared
    :class:`CacheConfig` (``cache_dir`` included) apply to later calls.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        fetcher: AvatarFetcher | None = None,
    ) -> None:
        self._config = config if config is not None else CacheConfig()
        self._fetcher = fetcher if fetcher is not None else HTTPFetcher()
        self._store = AvatarStore(self._config.cache_dir)

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def store(self) -> AvatarStore:
        """Store rooted at the config's current ``cache_dir``."""
        cache_dir = Path(self._config.cache_dir)
        if self._store.cache_dir != cache_dir:
            self._store = AvatarStore(cache_dir)
        return self._store

    async def close(self) -> None:
        await self._fetcher.disconnect()

    async def __aenter__(self) -> AvatarResolver:
        await self._fetcher.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Cache keys
    # ------------------------------------------------------------------

    def cache_key_for(self, user: User, size: int | AvatarSize = AvatarSize.X128) -> CacheKey:
        """Cache key the resolver would use for *user* at *size*."""
        size = AvatarSize.parse(size)
        level = self._config.cache_level
        if not user.avatar_hash:
            index = default_avatar_index(user.id, user.discriminator)
            return default_cache_key(index, size, level)
        return resolve_cache_key(
            user.id, user.avatar_hash, size, self._config.avatar_format, level
        )

    def cache_path_for(self, user: User, size: int | AvatarSize = AvatarSize.X128) -> Path | None:
        """Absolute cache path for *user* at *size*, ``None`` with caching disabled."""
        key = self.cache_key_for(user, size)
        return self.store.path_for(key.filename) if key.cached else None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _has_current_avatar(self, user: User) -> bool:
        if user.avatar is None:
            return False
        if self._config.refresh_policy == REFRESH_RECHECK_HASH:
            return user.resolved_hash == (user.avatar_hash or None)
        return True

    async def resolve_avatar(
        self,
        user: User,
        size: int | AvatarSize = AvatarSize.X128,
        on_complete: AvatarCallback | None = None,
    ) -> AvatarResult:
        """Resolve *user*'s avatar, calling ``on_complete(user, image)`` once.

        A user that already holds a resolved avatar is answered from
        memory without any I/O.  Users without an avatar hash get their
        default avatar.  Without the ``SIZE`` cache level the avatar is
        fetched at 512 whatever *size* asks for.

        Raises:
            ValueError: If *size* is not an :class:`AvatarSize`, whatever
                the cache level.  This is a caller error, not a resolution
                failure, so the callback is not called.
        """
        size = AvatarSize.parse(size)
        if self._has_current_avatar(user):
            result = AvatarResult(
                status=AvatarStatus.MEMORY,
                image=user.avatar,
                size=user.cache_size,
                format=user.cache_format,
            )
            self._notify(on_complete, user, result.image)
            return result

        if not user.avatar_hash:
            return await self.resolve_default_avatar(user, size, on_complete)

        fmt = self._config.avatar_format
        key = resolve_cache_key(
            user.id, user.avatar_hash, size, fmt, self._config.cache_level
        )
        url = avatar_url(user.identity, fmt, key.size)
        return await self._resolve(user, key, url, fmt, user.avatar_hash, on_complete)

    async def resolve_default_avatar(
        self,
        user: User,
        size: int | AvatarSize = AvatarSize.X128,
        on_complete: AvatarCallback | None = None,
    ) -> AvatarResult:
        """Resolve the platform default avatar for *user*.

        Always PNG.  The avatar already held in memory is not consulted,
        so this can be used to fetch the default for a user that has a
        custom avatar too.

        Raises:
            ValueError: If *size* is not an :class:`AvatarSize`.
        """
        size = AvatarSize.parse(size)
        index = default_avatar_index(user.id, user.discriminator)
        key = default_cache_key(index, size, self._config.cache_level)
        url = default_avatar_url(user.identity, index, key.size)
        return await self._resolve(user, key, url, AvatarFormat.PNG, None, on_complete)

    async def _resolve(
        self,
        user: User,
        key: CacheKey,
        url: str,
        fmt: AvatarFormat,
        avatar_hash: str | None,
        on_complete: AvatarCallback | None,
    ) -> AvatarResult:
        path = self.store.path_for(key.filename) if key.cached else None

        if path is not None:
            logger.debug("Avatar cache path for user %s: %s", user.id, path)
            image = self._load_cached(key.filename)
            if image is not None:
                return self._finish(
                    user, AvatarStatus.CACHE_HIT, image, key.size, fmt, path,
                    avatar_hash, on_complete,
                )

        try:
            data = await self._fetcher.fetch_bytes(url)
        except TransportError as exc:
            logger.error("Failed to download avatar for user %s: %s", user.id, exc)
            return self._fail(
                user, AvatarStatus.FETCH_FAILED, str(exc), key.size, fmt, path, on_complete
            )

        try:
            image = decode_image(data)
        except DecodeError as exc:
            logger.error("Downloaded avatar for user %s is not an image: %s", user.id, exc)
            return self._fail(
                user, AvatarStatus.DECODE_FAILED, str(exc), key.size, fmt, path, on_complete
            )

        if key.cached:
            try:
                self.store.write(key.filename, data)
            except CacheWriteError as exc:
                logger.warning("Avatar for user %s not cached: %s", user.id, exc)

        return self._finish(
            user, AvatarStatus.FETCHED, image, key.size, fmt, path, avatar_hash, on_complete
        )

    def _load_cached(self, filename: str) -> Image.Image | None:
        if not self.store.exists(filename):
            return None
        data = self.store.read(filename)
        if data is None:
            return None
        try:
            image = decode_image(data)
        except DecodeError as exc:
            # Corrupt entry: fall through to a fresh download which overwrites it
            logger.warning(
                "Ignoring corrupt cached avatar %s: %s", self.store.path_for(filename), exc
            )
            return None
        logger.debug("Avatar cache hit: %s", filename)
        return image

    def _finish(
        self,
        user: User,
        status: AvatarStatus,
        image: Image.Image,
        size: AvatarSize,
        fmt: AvatarFormat,
        path: Path | None,
        avatar_hash: str | None,
        on_complete: AvatarCallback | None,
    ) -> AvatarResult:
        user.set_resolved_avatar(image, size, fmt, avatar_hash)
        self._notify(on_complete, user, image)
        return AvatarResult(status=status, image=image, size=size, format=fmt, path=path)

    def _fail(
        self,
        user: User,
        status: AvatarStatus,
        reason: str,
        size: AvatarSize,
        fmt: AvatarFormat,
        path: Path | None,
        on_complete: AvatarCallback | None,
    ) -> AvatarResult:
        image = user.avatar if user.avatar is not None else placeholder_image(size)
        self._notify(on_complete, user, image)
        return AvatarResult(
            status=status, image=image, size=size, format=fmt, path=path, reason=reason
        )

    @staticmethod
    def _notify(
        on_complete: AvatarCallback | None, user: User, image: Image.Image
    ) -> None:
        if on_complete is None:
            return
        try:
            on_complete(user, image)
        except Exception:
            logger.exception("Avatar callback for user %s raised", user.id)

    # ------------------------------------------------------------------
    # Sync wrappers
    # ------------------------------------------------------------------

    def resolve_avatar_sync(
        self,
        user: User,
        size: int | AvatarSize = AvatarSize.X128,
        on_complete: AvatarCallback | None = None,
    ) -> AvatarResult:
        """Blocking version of :meth:`resolve_avatar`."""
        return run_sync(self.resolve_avatar(user, size, on_complete))

    def resolve_default_avatar_sync(
        self,
        user: User,
        size: int | AvatarSize = AvatarSize.X128,
        on_complete: AvatarCallback | None = None,
    ) -> AvatarResult:
        """Blocking version of :meth:`resolve_default_avatar`."""
        return run_sync(self.resolve_default_avatar(user, size, on_complete))

    def close_sync(self) -> None:
        run_sync(self.close())
