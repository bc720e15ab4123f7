"""
Object storage for rendered artifacts.

Artifacts are addressed by opaque slash-separated paths such as
"<book_id>/parts/0003-<hash>.pdf" or "<book_id>/final/final.pdf". The local
backend maps them under a root directory and refuses paths that escape it.
"""

import os
import tempfile
from pathlib import Path

from config.logging_config import get_logger
from core.errors import StorageError

logger = get_logger(__name__)


class LocalObjectStorage:
    """
    Filesystem-backed object storage.

    Usage:
        storage = LocalObjectStorage("data/storage")
        storage.upload("book-1/final/final.pdf", pdf_bytes)
        data = storage.download("book-1/final/final.pdf")
    """

    def __init__(self, root: str):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, path: str) -> Path:
        if not path or not isinstance(path, str):
            raise StorageError(f"Invalid storage path: {path!r}")
        target = (self.root / path.lstrip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            raise StorageError(f"Storage path escapes root: {path}")
        return target

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def upload(self, path: str, data: bytes, overwrite: bool = True) -> str:
        """
        Store bytes at path.

        The file is written to a temp file and renamed into place, so readers
        never see a partial artifact.

        Returns:
            The storage path.

        Raises:
            StorageError: If the object exists and overwrite is False, or
                          the write fails
        """
        target = self._resolve(path)
        if target.exists() and not overwrite:
            raise StorageError(f"Object already exists: {path}")

        temp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(dir=str(target.parent), suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(temp_name, target)
        except OSError as e:
            if temp_name and os.path.exists(temp_name):
                os.unlink(temp_name)
            logger.error(f"Upload failed for {path}: {e}")
            raise StorageError(f"Upload failed for {path}: {e}") from e

        logger.debug(f"Stored {len(data):,} bytes at {path}")
        return path

    def download(self, path: str) -> bytes:
        """
        Read the object at path.

        Raises:
            StorageError: If the object does not exist or cannot be read
        """
        target = self._resolve(path)
        if not target.is_file():
            raise StorageError(f"Object not found: {path}")
        try:
            return target.read_bytes()
        except OSError as e:
            raise StorageError(f"Download failed for {path}: {e}") from e

    def local_path(self, path: str) -> Path:
        """Filesystem location of an object (for file responses)."""
        return self._resolve(path)

