"""User -- identity wrapper carrying resolved avatar state."""

from __future__ import annotations

from typing import Any, Optional

from PIL import Image

from presence_avatars.protocol.errors import InvalidIdentityError
from presence_avatars.protocol.identity import (
    PresenceIdentity,
    display_label,
    identity_from_dict,
)
from presence_avatars.protocol.types import AvatarFormat, AvatarSize


class User:
    """A presence user plus the avatar resolved for it.

    The identity fields are read-only.  ``avatar``, ``cache_size`` and
    ``cache_format`` stay ``None`` until an :class:`AvatarResolver` has
    resolved an avatar for this instance, and are never cleared
    automatically afterwards.

    Two users compare equal when their ids match, whatever the other
    fields hold.
    """

    def __init__(self, identity: PresenceIdentity) -> None:
        self._identity = identity
        self._avatar: Image.Image | None = None
        self._cache_size: AvatarSize | None = None
        self._cache_format: AvatarFormat | None = None
        self._resolved_hash: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], cdn_endpoint: str | None = None) -> User:
        """Build a user straight from a presence user payload."""
        return cls(identity_from_dict(data, cdn_endpoint=cdn_endpoint))

    @property
    def identity(self) -> PresenceIdentity:
        return self._identity

    @property
    def id(self) -> int:
        return self._identity.id

    @property
    def username(self) -> str:
        return self._identity.username

    @property
    def display_name(self) -> Optional[str]:
        """Global display name, ``None`` if the user has not set one."""
        return self._identity.display_name

    @property
    def avatar_hash(self) -> Optional[str]:
        return self._identity.avatar

    @property
    def discriminator(self) -> int:
        """Legacy discriminator; always 0 for migrated accounts."""
        return self._identity.discriminator

    @property
    def cdn_endpoint(self) -> str:
        return self._identity.cdn_endpoint

    @property
    def avatar(self) -> Image.Image | None:
        return self._avatar

    @property
    def cache_size(self) -> AvatarSize | None:
        return self._cache_size

    @property
    def cache_format(self) -> AvatarFormat | None:
        return self._cache_format

    @property
    def resolved_hash(self) -> str | None:
        """Avatar hash the current ``avatar`` was resolved for (``None`` for defaults)."""
        return self._resolved_hash

    def update_identity(self, identity: PresenceIdentity) -> None:
        """Swap in a refreshed identity record for the same user.

        The resolved avatar is kept; whether it is reused depends on the
        resolver's refresh policy.

        Raises:
            InvalidIdentityError: If *identity* belongs to another user.
        """
        if identity.id != self._identity.id:
            raise InvalidIdentityError(
                f"Cannot update user {self._identity.id} with identity {identity.id}"
            )
        self._identity = identity

    def set_resolved_avatar(
        self,
        image: Image.Image,
        size: AvatarSize,
        avatar_format: AvatarFormat,
        avatar_hash: str | None,
    ) -> None:
        """Record a resolved avatar.  Called by the resolver."""
        self._avatar = image
        self._cache_size = size
        self._cache_format = avatar_format
        self._resolved_hash = avatar_hash

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(("presence-user", self.id))

    def __str__(self) -> str:
        return display_label(self._identity)

    def __repr__(self) -> str:
        return (
            f"User(id={self.id!r}, username={self.username!r}, "
            f"avatar_hash={self.avatar_hash!r})"
        )
