"""Local file access under a shared, non-blocking lock."""

import os
from pathlib import Path
from typing import BinaryIO, Optional

from loguru import logger

from ..core.model import FileUnavailableError
from .base import PathLike

if os.name == "posix":
    import fcntl
else:  # no advisory locking available
    fcntl = None


class LocalFile:
    """Read-only handle on a local file, share-locked until closed."""

    def __init__(self, path: PathLike):
        self.path = Path(path)
        self._file: Optional[BinaryIO] = None

        try:
            self._file = open(self.path, "rb")
        except OSError as e:
            raise FileUnavailableError(f"File {self.path.name} is currently not available!") from e

        try:
            if not self.path.is_file():
                raise FileUnavailableError(f"File {self.path.name} is not a regular file")
            self._lock()
            self.size = os.fstat(self._file.fileno()).st_size
        except BaseException:
            self._file.close()
            self._file = None
            raise

        logger.debug("Opened {} ({} bytes)", self.path, self.size)

    def _lock(self):
        if fcntl is None:
            return
        try:
            fcntl.flock(self._file.fileno(), fcntl.LOCK_SH | fcntl.LOCK_NB)
        except OSError as e:
            # someone holds an exclusive lock; fail fast instead of waiting
            raise FileUnavailableError(f"File {self.path.name} is currently not available!") from e

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def closed(self) -> bool:
        return self._file is None

    def seek(self, offset: int) -> int:
        return self._file.seek(offset)

    def tell(self) -> int:
        return self._file.tell()

    def read(self, size: int) -> bytes:
        return self._file.read(size)

    def close(self):
        """Release the lock and close the handle. Safe to call twice."""
        if self._file is None:
            return
        f, self._file = self._file, None
        try:
            if fcntl is not None:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        finally:
            f.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def open_local_file(path: PathLike) -> LocalFile:
    """Open *path* for streaming; raises FileUnavailableError on failure."""
    return LocalFile(path)
