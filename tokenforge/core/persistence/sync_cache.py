"""
Sync cache — the last version tag a consumer project synced.

Stored as plain text in ``.tokenforge/cache`` under the project root.
Writes are atomic (temp file in the same directory, then rename) so a
crash mid-write never leaves a half-written tag behind.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from tokenforge.core.errors import CacheIOError

logger = logging.getLogger(__name__)

CACHE_DIR = ".tokenforge"
CACHE_FILE = "cache"


class SyncCache:
    """Read/write the cached version for one consumer project."""

    def __init__(self, project_root: Path):
        self.project_root = project_root
        self.path = project_root / CACHE_DIR / CACHE_FILE

    def read(self) -> str | None:
        """The cached tag, trimmed; None if missing or blank.

        Raises:
            CacheIOError: The file exists but cannot be read.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise CacheIOError(str(self.path), str(e)) from e

        version = raw.strip()
        return version or None

    def write(self, version: str) -> None:
        """Persist ``version`` atomically.

        Raises:
            CacheIOError: The directory or file cannot be written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=".cache_", suffix=".tmp"
            )
            tmp = Path(tmp_path)
            try:
                with open(fd, "w", encoding="utf-8") as f:
                    f.write(version)
                tmp.replace(self.path)
            except Exception:
                tmp.unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CacheIOError(str(self.path), str(e)) from e

        logger.debug("Cached version %s at %s", version, self.path)
