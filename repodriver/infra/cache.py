"""
Content cache infrastructure for repodriver.

A directory of files, one per key, with:
- Atomic writes (write to temp, then rename)
- Write-once semantics: an existing entry is never replaced
- Automatic directory creation

Keys are commit shas, so an entry's content never legitimately changes.
Concurrent writers of the same key race harmlessly because each write is an
atomic rename of identical content.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional
import logging

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r'[^a-zA-Z0-9._-]')


class Cache:
    """
    Key to bytes store rooted at a directory.

    Example:
        cache = Cache(Path("~/.repodriver/cache.github/owner/repo"))
        cache.write(sha, b'{"name": "acme/lib"}')
        data = cache.read(sha)
    """

    def __init__(self, root: Path, enabled: bool = True):
        """
        Initialize Cache.

        Args:
            root: Directory holding cache entries
            enabled: When False, reads miss and writes are dropped
        """
        self.root = Path(root).expanduser()
        self.enabled = enabled

    def _path(self, key: str) -> Path:
        return self.root / _UNSAFE_KEY_CHARS.sub('-', key)

    def has(self, key: str) -> bool:
        """Check whether an entry exists for key."""
        return self.enabled and self._path(key).is_file()

    def read(self, key: str) -> Optional[bytes]:
        """
        Read an entry.

        Returns:
            Stored bytes, or None on a miss
        """
        if not self.enabled:
            return None
        path = self._path(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Error reading cache entry {path}: {e}")
            return None

        logger.debug(f"Cache hit for {key} in {self.root}")
        return data

    def write(self, key: str, data: bytes) -> None:
        """
        Write an entry unless one already exists.

        Args:
            key: Entry key
            data: Content to store
        """
        if not self.enabled:
            return

        path = self._path(key)
        if path.exists():
            existing = self.read(key)
            if existing is not None and existing != data:
                logger.warning(f"Refusing to overwrite cache entry {key} with different content")
            return

        self.root.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=self.root,
            prefix=f".{path.name}.",
            suffix=".tmp"
        )

        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)

            # Atomic rename
            os.replace(temp_path, path)

        except Exception:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

        logger.debug(f"Cached {key} in {self.root}")
