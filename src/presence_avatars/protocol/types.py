"""Core types and constants for avatar resolution."""

from __future__ import annotations

from enum import Enum, Flag, IntEnum


# Host serving avatars when the identity record does not name one
DEFAULT_CDN_ENDPOINT = "cdn.discordapp.com"

# Size every fetch canonicalises to when the cache is not split by size
CANONICAL_SIZE = 512

# Number of default avatars for modern (discriminator-free) accounts
DEFAULT_AVATAR_COUNT = 6

# Number of default avatars for legacy accounts
LEGACY_DEFAULT_AVATAR_COUNT = 5


class AvatarFormat(str, Enum):
    """Image formats avatars can be downloaded and cached in.

    Using ``str, Enum`` so that ``AvatarFormat.PNG == "png"`` is True and
    the value doubles as the file extension.
    """

    PNG = "png"
    JPEG = "jpeg"

    @classmethod
    def parse(cls, value: str | AvatarFormat) -> AvatarFormat:
        """Parse a format name case-insensitively (``"PNG"``, ``"jpeg"``, ``"jpg"``)."""
        if isinstance(value, AvatarFormat):
            return value
        name = str(value).strip().lower()
        if name == "jpg":
            name = "jpeg"
        try:
            return cls(name)
        except ValueError:
            raise ValueError(
                f"Invalid avatar format '{value}'. "
                f"Must be one of: {[f.value for f in cls]}"
            ) from None


class AvatarSize(IntEnum):
    """Square avatar sizes served by the CDN."""

    X16 = 16
    X32 = 32
    X64 = 64
    X128 = 128
    X256 = 256
    X512 = 512
    X1024 = 1024
    X2048 = 2048

    @property
    def label(self) -> str:
        """Filename segment for this size, e.g. ``x128``."""
        return f"x{self.value}"

    @classmethod
    def parse(cls, value: int | str) -> AvatarSize:
        """Accept ``128``, ``"128"`` or ``"x128"``."""
        if isinstance(value, str):
            value = value.strip().lower().lstrip("x")
        try:
            return cls(int(value))
        except ValueError:
            raise ValueError(
                f"Invalid avatar size '{value}'. "
                f"Must be one of: {[s.value for s in cls]}"
            ) from None


class CacheLevel(Flag):
    """Granularity of the on-disk avatar cache.

    ``NONE`` disables caching.  Any other level implies ``USER_ID``:
    ``HASH`` splits entries by avatar hash and ``SIZE`` by requested size.
    Without ``SIZE`` every avatar is stored (and fetched) at 512.
    """

    NONE = 0
    USER_ID = 1
    HASH = 2
    SIZE = 4

    @property
    def enabled(self) -> bool:
        return self != CacheLevel.NONE

    def normalized(self) -> CacheLevel:
        """Return this level with ``USER_ID`` added whenever caching is on."""
        if self.enabled:
            return self | CacheLevel.USER_ID
        return self

    @classmethod
    def parse(cls, value: str | CacheLevel) -> CacheLevel:
        """Parse ``"none"``, ``"user_id"``, ``"hash,size"`` or ``"hash|size"``."""
        if isinstance(value, CacheLevel):
            return value.normalized()
        level = cls.NONE
        for part in str(value).replace("|", ",").split(","):
            name = part.strip().upper().replace("-", "_")
            if not name:
                continue
            if name == "ID":
                name = "USER_ID"
            try:
                level |= cls[name]
            except KeyError:
                raise ValueError(
                    f"Invalid cache level '{part.strip()}'. "
                    f"Must be one of: {[m.name.lower() for m in cls]}"
                ) from None
        return level.normalized()
