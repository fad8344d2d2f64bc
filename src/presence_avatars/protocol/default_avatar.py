"""Default avatar index assignment.

Mirrors the platform's own assignment so the computed default matches
what the platform renders for a user without a custom avatar.
"""

from __future__ import annotations

from presence_avatars.protocol.types import (
    DEFAULT_AVATAR_COUNT,
    LEGACY_DEFAULT_AVATAR_COUNT,
)

# Snowflake timestamp bits start above this shift
_SNOWFLAKE_TIMESTAMP_SHIFT = 22


def default_avatar_index(user_id: int, discriminator: int = 0) -> int:
    """Return the default avatar index (0-5) for a user.

    Legacy accounts (``discriminator > 0``) use ``discriminator % 5``;
    migrated accounts use ``(user_id >> 22) % 6``.
    """
    if discriminator > 0:
        return discriminator % LEGACY_DEFAULT_AVATAR_COUNT
    return (user_id >> _SNOWFLAKE_TIMESTAMP_SHIFT) % DEFAULT_AVATAR_COUNT
