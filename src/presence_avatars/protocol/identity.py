"""Presence identity records and CDN URL construction.

An identity record is the read-only user payload handed out by the
presence client (``id``, ``username``, ``global_name``, ``avatar``,
``discriminator``).  Conversion to and from the wire dict is explicit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from presence_avatars.protocol.errors import InvalidIdentityError
from presence_avatars.protocol.types import (
    DEFAULT_CDN_ENDPOINT,
    AvatarFormat,
    AvatarSize,
)

_MAX_SNOWFLAKE = 2**64 - 1

# Avatar hashes are hex digests, optionally prefixed with "a_" for animated ones.
# Restricting the alphabet keeps them safe to embed in cache file names.
_AVATAR_HASH_RE = re.compile(r"^[A-Za-z0-9_]{1,64}$")


@dataclass(frozen=True)
class PresenceIdentity:
    """Immutable view of a presence user's identity.

    Raises:
        InvalidIdentityError: If the id or discriminator is out of range,
            or the avatar hash is not safe in a file name.
    """

    id: int
    username: str
    display_name: Optional[str] = None
    avatar: Optional[str] = None
    discriminator: int = 0
    cdn_endpoint: str = DEFAULT_CDN_ENDPOINT

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", _parse_snowflake(self.id))
        object.__setattr__(self, "discriminator", _parse_discriminator(self.discriminator))
        object.__setattr__(self, "avatar", validate_avatar_hash(self.avatar))

    @property
    def has_custom_avatar(self) -> bool:
        return bool(self.avatar)


def _parse_snowflake(raw: Any) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidIdentityError(f"Invalid user id: {raw!r}") from None
    if value < 0 or value > _MAX_SNOWFLAKE:
        raise InvalidIdentityError(f"User id out of range: {raw!r}")
    return value


def _parse_discriminator(raw: Any) -> int:
    if raw in (None, ""):
        return 0
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidIdentityError(f"Invalid discriminator: {raw!r}") from None
    if value < 0 or value > 9999:
        raise InvalidIdentityError(f"Discriminator out of range: {raw!r}")
    return value


def validate_avatar_hash(avatar_hash: Optional[str]) -> Optional[str]:
    """Return *avatar_hash* unchanged, or ``None`` when empty.

    Raises:
        InvalidIdentityError: If the hash contains characters that are not
            safe in a file name.
    """
    if not avatar_hash:
        return None
    if not isinstance(avatar_hash, str) or not _AVATAR_HASH_RE.match(avatar_hash):
        raise InvalidIdentityError(f"Invalid avatar hash: {avatar_hash!r}")
    return avatar_hash


def identity_from_dict(
    data: dict[str, Any],
    cdn_endpoint: str | None = None,
) -> PresenceIdentity:
    """Build a :class:`PresenceIdentity` from a presence user payload.

    ``id`` and ``discriminator`` may be strings (as sent on the wire) or
    ints.  ``global_name`` maps to ``display_name``.

    Raises:
        InvalidIdentityError: If a required field is missing or malformed.
    """
    if "id" not in data:
        raise InvalidIdentityError("Identity payload has no 'id'")
    return PresenceIdentity(
        id=data["id"],
        username=str(data.get("username") or ""),
        display_name=data.get("global_name") or data.get("display_name") or None,
        avatar=data.get("avatar"),
        discriminator=data.get("discriminator"),
        cdn_endpoint=cdn_endpoint or data.get("cdn_endpoint") or DEFAULT_CDN_ENDPOINT,
    )


def identity_to_dict(identity: PresenceIdentity) -> dict[str, Any]:
    """Serialize an identity back to the wire payload shape.

    Excludes ``None``-valued optional fields.
    """
    d: dict[str, Any] = {
        "id": str(identity.id),
        "username": identity.username,
        "discriminator": f"{identity.discriminator:04d}" if identity.discriminator else "0",
    }
    if identity.display_name is not None:
        d["global_name"] = identity.display_name
    if identity.avatar is not None:
        d["avatar"] = identity.avatar
    if identity.cdn_endpoint != DEFAULT_CDN_ENDPOINT:
        d["cdn_endpoint"] = identity.cdn_endpoint
    return d


def avatar_url(
    identity: PresenceIdentity,
    avatar_format: AvatarFormat | str = AvatarFormat.PNG,
    size: int | AvatarSize = AvatarSize.X128,
) -> str:
    """Return the CDN URL of the identity's custom avatar.

    Raises:
        InvalidIdentityError: If the identity has no custom avatar.
    """
    if not identity.avatar:
        raise InvalidIdentityError(f"User {identity.id} has no custom avatar")
    fmt = AvatarFormat.parse(avatar_format)
    return (
        f"https://{identity.cdn_endpoint}/avatars/{identity.id}/"
        f"{identity.avatar}.{fmt.value}?size={int(size)}"
    )


def default_avatar_url(
    identity: PresenceIdentity,
    index: int,
    size: int | AvatarSize = AvatarSize.X128,
) -> str:
    """Return the CDN URL of a default (embed) avatar.  Always PNG."""
    return f"https://{identity.cdn_endpoint}/embed/avatars/{index}.png?size={int(size)}"


def discrim_label(identity: PresenceIdentity) -> str:
    """Return the legacy discriminator as ``#0042``."""
    return f"#{identity.discriminator:04d}"


def display_label(identity: PresenceIdentity) -> str:
    """Human-readable name for the identity.

    Uses the display name when set, ``username#0042`` for legacy accounts,
    and the bare username otherwise.
    """
    if identity.display_name:
        return identity.display_name
    if identity.discriminator > 0:
        return f"{identity.username}{discrim_label(identity)}"
    return identity.username
