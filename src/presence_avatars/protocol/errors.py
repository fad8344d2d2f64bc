"""Avatar exception hierarchy.

All package-specific exceptions inherit from :class:`AvatarError`.
"""

from __future__ import annotations


class AvatarError(Exception):
    """Base exception for all avatar resolution errors."""


class InvalidIdentityError(AvatarError):
    """Raised when an identity record fails validation."""


class TransportError(AvatarError):
    """Raised when avatar bytes cannot be fetched (network or protocol failure)."""


class DecodeError(AvatarError):
    """Raised when fetched or cached bytes are not a valid image."""


class CacheWriteError(AvatarError):
    """Raised when the cache directory or file cannot be written."""
