"""
Local filesystem store for uploaded receipt files.

Files live under ``<root>/<YYYY>/<MM>/<stored name>`` so the root can be
mounted as-is at ``/uploads``.
"""
from __future__ import annotations

import logging
from pathlib import Path

from app.errors import StorageError

logger = logging.getLogger(__name__)


class LocalFileStore:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def directory_for(self, year: str, month: str) -> Path:
        return self.root / year / month

    def save(self, year: str, month: str, name: str, content: bytes) -> Path:
        directory = self.directory_for(year, month)
        path = directory / name
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            logger.exception("Failed to write %s", path)
            raise StorageError() from e
        logger.info("Stored file %s (%d bytes)", path, len(content))
        return path

    def delete(self, path: str | Path) -> bool:
        """Remove ``path``; returns False (and logs) if it could not be removed."""
        try:
            Path(path).unlink()
        except FileNotFoundError:
            return True
        except OSError:
            logger.exception("Could not remove %s; file is orphaned", path)
            return False
        logger.info("Removed %s", path)
        return True
