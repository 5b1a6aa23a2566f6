"""Two-tier cache for canonical license texts.

License texts are kept in an in-process dictionary and mirrored to one
plain-text file per license identifier, so repeated runs do not download
the same SPDX texts again.
"""

import logging
import re
import threading
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Prefix of the fallback text produced when a license download fails
FALLBACK_PREFIX = "!!! License text"

_SAFE_FILENAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.+_-]*$")


def default_cache_dir() -> Path:
    """Return the per-user cache directory for license texts."""
    return Path.home() / ".cache" / "nuget_license_collector" / "licenses"


class LicenseTextCache:
    """Memory and file cache for license texts keyed by license identifier.

    Lookups hit the in-memory map first and fall back to
    ``<cache_dir>/<identifier>.txt``. Files older than the TTL are deleted
    on access. Disk problems are logged and never raised, so a broken cache
    only costs a re-download.

    Attributes:
        cache_dir: Directory holding the cached license files.
        ttl_days: Number of days before a cached file expires (default: 30).
    """

    DEFAULT_TTL_DAYS = 30

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        ttl_days: int = DEFAULT_TTL_DAYS,
    ):
        """Initialize the license text cache.

        Args:
            cache_dir: Directory for cached files. If None, uses
                ~/.cache/nuget_license_collector/licenses.
            ttl_days: Number of days before cached files expire.

        Raises:
            OSError: If the cache directory cannot be created.
        """
        self.cache_dir = cache_dir or default_cache_dir()
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.ttl_days = ttl_days
        self._memory: dict[str, str] = {}
        self._lock = threading.Lock()

    def _path_for(self, identifier: str) -> Optional[Path]:
        if not _SAFE_FILENAME.match(identifier):
            return None
        return self.cache_dir / f"{identifier}.txt"

    def _is_expired(self, path: Path) -> bool:
        age_seconds = time.time() - path.stat().st_mtime
        return age_seconds >= self.ttl_days * 86400

    def get(self, identifier: str) -> Optional[str]:
        """Retrieve cached license text.

        Args:
            identifier: License identifier (e.g., "MIT").

        Returns:
            The cached text, or None on a miss or an expired file.
        """
        with self._lock:
            cached = self._memory.get(identifier)
        if cached is not None:
            return cached

        path = self._path_for(identifier)
        if path is None:
            return None

        try:
            if not path.is_file():
                return None

            if self._is_expired(path):
                logger.debug("Cached license text for %s expired, deleting", identifier)
                path.unlink()
                return None

            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Error reading license cache for %s: %s", identifier, e)
            return None

        with self._lock:
            self._memory[identifier] = text
        return text

    def put(self, identifier: str, text: str, persist: bool = True) -> None:
        """Store license text.

        The text always goes into the in-memory map. It is written to disk
        only if ``persist`` is true and the text is not a download fallback.

        Args:
            identifier: License identifier.
            text: License text.
            persist: False to keep the entry in memory only.
        """
        with self._lock:
            self._memory[identifier] = text

        if not persist or text.startswith(FALLBACK_PREFIX):
            return

        path = self._path_for(identifier)
        if path is None:
            logger.debug("Not persisting license text for unsafe id %r", identifier)
            return

        try:
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            logger.warning("Error saving license cache for %s: %s", identifier, e)

    def clear(self, identifier: Optional[str] = None) -> int:
        """Delete cached license texts.

        Args:
            identifier: Optional license identifier to clear. If None,
                every cached file and in-memory entry is removed.

        Returns:
            Number of files deleted.
        """
        with self._lock:
            if identifier is None:
                self._memory.clear()
            else:
                self._memory.pop(identifier, None)

        deleted = 0
        try:
            if identifier is None:
                files = list(self.cache_dir.glob("*.txt"))
            else:
                path = self._path_for(identifier)
                files = [path] if path is not None and path.is_file() else []
        except OSError as e:
            logger.warning("Error clearing license cache: %s", e)
            return 0

        for path in files:
            try:
                path.unlink()
                deleted += 1
            except OSError as e:
                logger.warning("Could not delete cache file %s: %s", path.name, e)

        logger.info("Cleared %d license cache files", deleted)
        return deleted

    def info(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache information:
                - path: Path to the cache directory
                - count: Number of cached license files
                - size_bytes: Total size of cached files in bytes
        """
        count = 0
        size_bytes = 0
        try:
            for path in self.cache_dir.glob("*.txt"):
                count += 1
                size_bytes += path.stat().st_size
        except OSError as e:
            logger.warning("Error reading license cache directory: %s", e)

        return {
            "path": str(self.cache_dir),
            "count": count,
            "size_bytes": size_bytes,
        }
