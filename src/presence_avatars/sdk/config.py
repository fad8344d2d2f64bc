"""Avatar cache configuration via dataclass (no pydantic -- instant construction)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from presence_avatars.protocol.types import AvatarFormat, CacheLevel

logger = logging.getLogger(__name__)

_CACHE_SUBDIR = Path("Discord Rpc") / "Cache"

REFRESH_STICKY = "sticky"
REFRESH_RECHECK_HASH = "recheck-hash"
_VALID_POLICIES = {REFRESH_STICKY, REFRESH_RECHECK_HASH}


def default_home() -> Path:
    """Base directory for avatar data.

    ``PRESENCE_AVATARS_HOME`` overrides ``~/.presence-avatars`` (useful for
    testing / isolation).
    """
    home = os.getenv("PRESENCE_AVATARS_HOME")
    return Path(home) if home else Path.home() / ".presence-avatars"


@dataclass
class CacheConfig:
    """Configuration shared by one or more avatar resolvers.

    There is no process-wide instance: pass the same ``CacheConfig`` to
    several resolvers to share settings.  The cache directory is not
    created here, only on the first cache write.

    ``refresh_policy`` controls what happens once a user has a resolved
    avatar: ``"sticky"`` never looks again, ``"recheck-hash"`` resolves
    again when the user's avatar hash no longer matches the one the
    avatar was resolved for.

    Priority (highest wins): constructor arg > env var > config.toml > default.
    """

    cache_dir: Path | str | None = None
    cache_level: CacheLevel | str | None = None
    avatar_format: AvatarFormat | str | None = None
    refresh_policy: str | None = None
    home: Path | str | None = None

    def __post_init__(self) -> None:
        self.home = Path(self.home) if self.home is not None else default_home()

        # Explicit args first, then env vars; None means "not decided yet"
        if self.cache_dir is None:
            env_dir = os.getenv("PRESENCE_AVATARS_CACHE_DIR")
            if env_dir:
                self.cache_dir = env_dir
        if self.cache_level is None:
            self.cache_level = os.getenv("PRESENCE_AVATARS_CACHE_LEVEL") or None
        if self.avatar_format is None:
            self.avatar_format = os.getenv("PRESENCE_AVATARS_FORMAT") or None
        if self.refresh_policy is None:
            self.refresh_policy = os.getenv("PRESENCE_AVATARS_REFRESH_POLICY") or None

        # Load optional config.toml (lowest priority -- only fills gaps)
        config_path = self.home / "config.toml"
        if config_path.exists():
            self._load_config_file(config_path)

        # Defaults
        if self.cache_dir is None:
            self.cache_dir = self.home / _CACHE_SUBDIR
        self.cache_dir = Path(self.cache_dir).expanduser()
        self.cache_level = CacheLevel.parse(
            self.cache_level if self.cache_level is not None else CacheLevel.NONE
        )
        self.avatar_format = AvatarFormat.parse(
            self.avatar_format if self.avatar_format is not None else AvatarFormat.PNG
        )
        if self.refresh_policy is None:
            self.refresh_policy = REFRESH_STICKY

        if self.refresh_policy not in _VALID_POLICIES:
            raise ValueError(
                f"Invalid refresh_policy '{self.refresh_policy}'. "
                f"Must be one of: {sorted(_VALID_POLICIES)}"
            )

    @property
    def caching_enabled(self) -> bool:
        return self.cache_level.enabled

    def _load_config_file(self, path: Path) -> None:
        """Load optional config.toml, applying values for fields still unset."""
        try:
            import tomllib
        except ModuleNotFoundError:
            import tomli as tomllib  # type: ignore[no-redef]  # Python 3.10 fallback

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except Exception:
            logger.warning("Failed to load config file %s", path, exc_info=True)
            return

        section = data.get("cache", {})

        if self.cache_dir is None and "dir" in section:
            self.cache_dir = section["dir"]
        if self.cache_level is None and "level" in section:
            level = section["level"]
            # Accept both level = "hash,size" and level = ["hash", "size"]
            if isinstance(level, list):
                level = ",".join(level)
            self.cache_level = level
        if self.avatar_format is None and "format" in section:
            self.avatar_format = section["format"]
        if self.refresh_policy is None and "refresh_policy" in section:
            self.refresh_policy = section["refresh_policy"]
