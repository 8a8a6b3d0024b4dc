"""Scoped staging directory for downloaded assets.

This module provides:
- StagingDirectory: Temporary directory owned by one edge's transfers

The directory itself is only created when the first file is staged, so a
dry run leaves no trace on disk. Everything below it is removed when the
context exits, whatever the outcome of the transfers.
"""

from __future__ import annotations

import contextlib
import logging
import shutil
import tempfile
import threading
from pathlib import Path

from albumsync.client.api import LocalIOError
from albumsync.client.sync.types import SyncError

logger = logging.getLogger(__name__)

STAGING_PREFIX = "albumsync-"


class StagingDirectory:
    """Temporary directory holding downloaded assets between download and upload.

    Usage:
        with StagingDirectory() as staging:
            path = staging.write(asset.id, "photo.jpg", content)
            ...
            staging.release(path)
    """

    def __init__(self, root: Path | None = None) -> None:
        """Initialize the staging directory.

        Args:
            root: Parent directory for the temporary directory.
                Defaults to the system temporary directory.
        """
        self._root = root
        self._path: Path | None = None
        self._active = False
        self._lock = threading.Lock()

    @property
    def path(self) -> Path | None:
        """Directory path, or None if nothing was staged yet."""
        return self._path

    def __enter__(self) -> StagingDirectory:
        self._active = True
        return self

    def __exit__(self, *args: object) -> None:
        self.cleanup()

    def _ensure_dir(self) -> Path:
        with self._lock:
            if not self._active:
                raise SyncError("Staging directory used outside of its scope")
            if self._path is None:
                self._path = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self._root))
                logger.debug(f"Created staging directory {self._path}")
            return self._path

    def write(self, slot: str, filename: str, content: bytes) -> Path:
        """Stage one file.

        Each slot gets its own subdirectory so that assets sharing a
        filename never overwrite each other.

        Args:
            slot: Unique name for this file (e.g., the source asset id).
            filename: Name of the staged file.
            content: File content.

        Returns:
            Path of the staged file.

        Raises:
            LocalIOError: If the file cannot be written.
        """
        try:
            slot_dir = self._ensure_dir() / slot
            slot_dir.mkdir(parents=True, exist_ok=True)
            staged = slot_dir / filename
            staged.write_bytes(content)
        except OSError as e:
            raise LocalIOError(f"Cannot stage '{filename}': {e}") from e
        return staged

    def release(self, staged: Path) -> None:
        """Remove a staged file and its slot directory."""
        with contextlib.suppress(OSError):
            staged.unlink()
        with contextlib.suppress(OSError):
            staged.parent.rmdir()

    def cleanup(self) -> None:
        """Remove the staging directory and everything in it."""
        with self._lock:
            self._active = False
            path, self._path = self._path, None
        if path is None:
            return
        shutil.rmtree(path, ignore_errors=True)
        if path.exists():
            logger.warning(f"Could not remove staging directory {path}")
        else:
            logger.debug(f"Removed staging directory {path}")
