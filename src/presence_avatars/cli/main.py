"""presence-avatars CLI -- inspect and populate the avatar cache.

Thin wrapper around the SDK using click.
Network commands use the resolver's sync wrappers.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from presence_avatars.protocol import (
    AvatarError,
    AvatarSize,
    PresenceIdentity,
    default_avatar_index,
    validate_avatar_hash,
)
from presence_avatars.protocol.types import DEFAULT_CDN_ENDPOINT
from presence_avatars.sdk.config import CacheConfig
from presence_avatars.sdk.resolver import AvatarResolver
from presence_avatars.sdk.user import User

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_SIZE_CHOICES = [str(s.value) for s in AvatarSize]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(msg: str) -> None:
    """Print an error message to stderr and exit 1."""
    click.echo(msg, err=True)
    raise SystemExit(1)


def _build_config(ctx: click.Context) -> CacheConfig:
    try:
        return CacheConfig(
            cache_dir=ctx.obj.get("cache_dir"),
            cache_level=ctx.obj.get("cache_level"),
            avatar_format=ctx.obj.get("avatar_format"),
        )
    except ValueError as exc:
        _error(f"Error: {exc}")


def _build_user(
    user_id: int,
    avatar_hash: str | None,
    discriminator: int,
    cdn: str = DEFAULT_CDN_ENDPOINT,
) -> User:
    try:
        identity = PresenceIdentity(
            id=user_id,
            username="",
            avatar=validate_avatar_hash(avatar_hash),
            discriminator=discriminator,
            cdn_endpoint=cdn,
        )
    except AvatarError as exc:
        _error(f"Error: {exc}")
    return User(identity)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="presence-avatars")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Cache directory (default: ~/.presence-avatars/Discord Rpc/Cache).",
)
@click.option(
    "--cache-level",
    "-c",
    default=None,
    help="Cache level: none, user_id, hash, size or a combination like hash,size.",
)
@click.option(
    "--format",
    "-f",
    "avatar_format",
    type=click.Choice(["png", "jpeg"], case_sensitive=False),
    default=None,
    help="Avatar image format (default: png).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    cache_dir: Path | None,
    cache_level: str | None,
    avatar_format: str | None,
) -> None:
    """presence-avatars -- cached avatar resolution for presence users."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=_LOG_FORMAT,
    )
    ctx.ensure_object(dict)
    ctx.obj["cache_dir"] = cache_dir
    ctx.obj["cache_level"] = cache_level
    ctx.obj["avatar_format"] = avatar_format


# ---------------------------------------------------------------------------
# presence-avatars default-index
# ---------------------------------------------------------------------------


@cli.command("default-index")
@click.argument("user_id", type=int)
@click.option("--discriminator", "-d", default=0, type=int, help="Legacy discriminator.")
def default_index(user_id: int, discriminator: int) -> None:
    """Print the default avatar index for a user."""
    click.echo(default_avatar_index(user_id, discriminator))


# ---------------------------------------------------------------------------
# presence-avatars path
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("user_id", type=int)
@click.option("--hash", "avatar_hash", default=None, help="Avatar hash.")
@click.option("--discriminator", "-d", default=0, type=int, help="Legacy discriminator.")
@click.option("--size", "-s", type=click.Choice(_SIZE_CHOICES), default="128", help="Requested size.")
@click.pass_context
def path(
    ctx: click.Context,
    user_id: int,
    avatar_hash: str | None,
    discriminator: int,
    size: str,
) -> None:
    """Print the cache file an avatar would be stored in."""
    config = _build_config(ctx)
    user = _build_user(user_id, avatar_hash, discriminator)
    resolver = AvatarResolver(config)
    cache_path = resolver.cache_path_for(user, int(size))
    if cache_path is None:
        click.echo("Caching disabled.")
        return
    click.echo(str(cache_path))


# ---------------------------------------------------------------------------
# presence-avatars fetch
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("user_id", type=int)
@click.option("--hash", "avatar_hash", default=None, help="Avatar hash (omit for the default avatar).")
@click.option("--discriminator", "-d", default=0, type=int, help="Legacy discriminator.")
@click.option("--size", "-s", type=click.Choice(_SIZE_CHOICES), default="128", help="Requested size.")
@click.option("--cdn", default=DEFAULT_CDN_ENDPOINT, show_default=True, help="CDN host.")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also save the decoded avatar to this file.",
)
@click.pass_context
def fetch(
    ctx: click.Context,
    user_id: int,
    avatar_hash: str | None,
    discriminator: int,
    size: str,
    cdn: str,
    output: Path | None,
) -> None:
    """Resolve an avatar through the cache, downloading it if needed."""
    config = _build_config(ctx)
    user = _build_user(user_id, avatar_hash, discriminator, cdn)
    resolver = AvatarResolver(config)
    try:
        result = resolver.resolve_avatar_sync(user, int(size))
    finally:
        resolver.close_sync()

    if not result.ok:
        _error(f"Error: {result.reason}")

    click.echo(f"{result.status.value}: {result.size.value}px {result.format.value}")
    if result.path is not None:
        click.echo(f"Cache: {result.path}")
    if output is not None:
        try:
            result.image.save(output)
        except (OSError, ValueError) as exc:
            _error(f"Error: cannot save {output}: {exc}")
        click.echo(f"Saved: {output}")
