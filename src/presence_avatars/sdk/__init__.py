"""Avatar SDK -- cache configuration, users and the avatar resolver."""

from presence_avatars.sdk.config import CacheConfig
from presence_avatars.sdk.resolver import AvatarResolver, AvatarResult, AvatarStatus
from presence_avatars.sdk.user import User

__all__ = ["AvatarResolver", "AvatarResult", "AvatarStatus", "CacheConfig", "User"]
