"""Avatar protocol -- pure cache-key, default-index and identity logic.

Public API re-exports for ``presence_avatars.protocol``.
"""

from presence_avatars.protocol.types import (
    CANONICAL_SIZE,
    DEFAULT_CDN_ENDPOINT,
    AvatarFormat,
    AvatarSize,
    CacheLevel,
)

from presence_avatars.protocol.errors import (
    AvatarError,
    InvalidIdentityError,
    TransportError,
    DecodeError,
    CacheWriteError,
)

from presence_avatars.protocol.cache_key import (
    CacheKey,
    resolve_cache_key,
    default_cache_key,
)

from presence_avatars.protocol.default_avatar import default_avatar_index

from presence_avatars.protocol.identity import (
    PresenceIdentity,
    identity_from_dict,
    identity_to_dict,
    validate_avatar_hash,
    avatar_url,
    default_avatar_url,
    discrim_label,
    display_label,
)

__all__ = [
    # Types
    "CANONICAL_SIZE",
    "DEFAULT_CDN_ENDPOINT",
    "AvatarFormat",
    "AvatarSize",
    "CacheLevel",
    # Errors
    "AvatarError",
    "InvalidIdentityError",
    "TransportError",
    "DecodeError",
    "CacheWriteError",
    # Cache keys
    "CacheKey",
    "resolve_cache_key",
    "default_cache_key",
    # Default avatars
    "default_avatar_index",
    # Identity
    "PresenceIdentity",
    "identity_from_dict",
    "identity_to_dict",
    "validate_avatar_hash",
    "avatar_url",
    "default_avatar_url",
    "discrim_label",
    "display_label",
]
