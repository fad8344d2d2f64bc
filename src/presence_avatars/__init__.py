"""presence-avatars -- cached avatar resolution for chat-presence users.

Top-level convenience re-exports::

    from presence_avatars import AvatarResolver, CacheConfig, User
    from presence_avatars.protocol import CacheLevel, resolve_cache_key  # pure functions
"""

__version__ = "0.1.0"

from presence_avatars.sdk.config import CacheConfig
from presence_avatars.sdk.resolver import AvatarResolver, AvatarResult, AvatarStatus
from presence_avatars.sdk.user import User

__all__ = [
    "__version__",
    "AvatarResolver",
    "AvatarResult",
    "AvatarStatus",
    "CacheConfig",
    "User",
]
