"""On-disk avatar cache store."""

from __future__ import annotations

import logging
from pathlib import Path

from presence_avatars.protocol.errors import CacheWriteError

logger = logging.getLogger(__name__)


class AvatarStore:
    """Flat directory of cached avatar files.

    The directory is created lazily by the first :meth:`write`.  Entries
    are never evicted.
    """

    def __init__(self, cache_dir: Path | str) -> None:
        self._cache_dir = Path(cache_dir)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def path_for(self, filename: str) -> Path:
        return self._cache_dir / filename

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).is_file()

    def read(self, filename: str) -> bytes | None:
        """Return the cached bytes, or ``None`` if the entry is missing or unreadable."""
        path = self.path_for(filename)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError:
            logger.warning("Failed to read cached avatar %s", path, exc_info=True)
            return None

    def write(self, filename: str, data: bytes) -> Path:
        """Write *data* to the cache, creating the directory if needed.

        Raises:
            CacheWriteError: If the directory or file cannot be written.
        """
        path = self.path_for(filename)
        try:
            # Concurrent resolutions may race to create the directory
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise CacheWriteError(f"Cannot write cached avatar {path}: {exc}") from exc
        logger.debug("Cached avatar at %s (%d bytes)", path, len(data))
        return path
