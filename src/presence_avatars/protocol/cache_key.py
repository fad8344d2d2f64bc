"""Cache key derivation for custom and default avatars.

Pure functions mapping an identity and a requested size onto the size
that will actually be fetched and the file name it is stored under.
The fetch size and the file name are always derived together so the
two can never disagree.

File layout (relative to the cache root)::

    {id}[-{hash}][x{size}].{ext}       custom avatar
    default-{index}[x{size}].png      default avatar

Segments in brackets are present only when the matching
:class:`~presence_avatars.protocol.types.CacheLevel` flag is set.
"""

from __future__ import annotations

from dataclasses import dataclass

from presence_avatars.protocol.types import (
    CANONICAL_SIZE,
    AvatarFormat,
    AvatarSize,
    CacheLevel,
)


@dataclass(frozen=True)
class CacheKey:
    """Effective fetch size plus the relative cache file name (``None`` if uncached)."""

    size: AvatarSize
    filename: str | None

    @property
    def cached(self) -> bool:
        return self.filename is not None


def _effective_size(requested: int | AvatarSize, level: CacheLevel) -> AvatarSize:
    if CacheLevel.SIZE in level:
        return AvatarSize.parse(requested)
    return AvatarSize(CANONICAL_SIZE)


def resolve_cache_key(
    user_id: int,
    avatar_hash: str | None,
    requested_size: int | AvatarSize,
    avatar_format: AvatarFormat | str,
    level: CacheLevel,
) -> CacheKey:
    """Compute the cache key for a custom avatar.

    With caching disabled no file name is produced and the fetch size is
    fixed at 512.  Otherwise the size is kept only when ``SIZE`` is set.
    The hash segment is added only when ``HASH`` is set and the hash is
    non-empty; callers route hash-less users to :func:`default_cache_key`.
    """
    level = level.normalized()
    if not level.enabled:
        return CacheKey(AvatarSize(CANONICAL_SIZE), None)

    size = _effective_size(requested_size, level)
    fmt = AvatarFormat.parse(avatar_format)

    filename = str(user_id)
    if CacheLevel.HASH in level and avatar_hash:
        filename += f"-{avatar_hash}"
    if CacheLevel.SIZE in level:
        filename += size.label
    return CacheKey(size, f"{filename}.{fmt.value}")


def default_cache_key(
    index: int,
    requested_size: int | AvatarSize,
    level: CacheLevel,
) -> CacheKey:
    """Compute the cache key for a default avatar.

    Default avatars are only served as PNG, whatever format is configured.
    """
    level = level.normalized()
    if not level.enabled:
        return CacheKey(AvatarSize(CANONICAL_SIZE), None)

    size = _effective_size(requested_size, level)
    suffix = size.label if CacheLevel.SIZE in level else ""
    return CacheKey(size, f"default-{index}{suffix}.{AvatarFormat.PNG.value}")
