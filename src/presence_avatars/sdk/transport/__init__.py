"""Avatar fetch transport layer."""

from presence_avatars.sdk.transport.base import AvatarFetcher
from presence_avatars.sdk.transport.http import HTTPFetcher

__all__ = [
    "AvatarFetcher",
    "HTTPFetcher",
]
