# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""File-backed durable cache.

Each key is stored as a UTF-8 file inside a single directory. Writes go to
a temporary file in the same directory and are moved into place with
os.replace, so readers never observe a partially written value.

Example:
    cache = FileCache(Path(".eduverse"))
    cache.set("eduverse_data", dataset.to_json())
    raw = cache.get("eduverse_data")
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from src.infrastructure.cache.base import CacheError

logger = logging.getLogger(__name__)


class FileCache:
    """Durable cache keeping one file per key.

    Attributes:
        directory: Directory holding the cache files.
    """

    SUFFIX = ".cache"

    def __init__(self, directory: Path | str) -> None:
        """Initialize the file cache.

        The directory is created lazily on first write.

        Args:
            directory: Directory holding the cache files.
        """
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        """Map a cache key to its file path.

        Raises:
            CacheError: If the key is empty.
        """
        if not key:
            raise CacheError("Cache key must not be empty")
        return self.directory / f"{quote(key, safe='')}{self.SUFFIX}"

    def get(self, key: str) -> Optional[str]:
        """Read a value.

        Args:
            key: The cache key.

        Returns:
            The stored string or None if the key was never written.

        Raises:
            CacheError: If the file exists but cannot be read.
        """
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise CacheError(f"Failed to read cache key: {key}", e) from e

    def set(self, key: str, value: str) -> None:
        """Write a value atomically.

        Args:
            key: The cache key.
            value: The string to store.

        Raises:
            CacheError: If the value cannot be written.
        """
        path = self._path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CacheError(f"Failed to write cache key: {key}", e) from e

        logger.debug("Cache key written: %s (%d chars)", key, len(value))
