"""OS directory filesystem.

Serves files below a root directory. Security: resolves symlinks and
verifies the final path is within the root to prevent path traversal;
escapes are reported as ``PermissionError``.
"""

from __future__ import annotations

import errno
import logging
import os
import stat
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

from spaserve.config import clean_path
from spaserve.errors import ConfigurationError, not_found
from spaserve.fs.protocol import FileInfo, NonRegularHandle

logger = logging.getLogger("spaserve.fs")


class OSFile:
    """A regular file opened from disk in binary mode."""

    __slots__ = ("_fp", "_name")

    def __init__(self, fp: BinaryIO, name: str) -> None:
        self._fp = fp
        self._name = name

    def stat(self) -> FileInfo:
        st = os.fstat(self._fp.fileno())
        return FileInfo(
            name=self._name,
            size=st.st_size,
            modified=datetime.fromtimestamp(st.st_mtime, UTC),
            is_regular=stat.S_ISREG(st.st_mode),
        )

    def read(self, size: int = -1, /) -> bytes:
        return self._fp.read(size)

    def seek(self, offset: int, whence: int = 0, /) -> int:
        return self._fp.seek(offset, whence)

    def close(self) -> None:
        self._fp.close()

    @property
    def closed(self) -> bool:
        return self._fp.closed

    def __enter__(self) -> OSFile:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class DirFileSystem:
    """Filesystem rooted at a directory on disk.

    Usage::

        fs = DirFileSystem("./dist")
        handler = StaticHandler(fs)
    """

    __slots__ = ("_root",)

    def __init__(self, root: str | Path) -> None:
        resolved = Path(root).resolve()
        if not resolved.is_dir():
            msg = f"Static root is not a directory: {root}"
            raise ConfigurationError(msg)
        self._root = resolved

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        relative = clean_path(path).lstrip("/")
        if "\x00" in relative:
            raise not_found(path)
        target = (self._root / relative).resolve() if relative else self._root
        if not target.is_relative_to(self._root):
            logger.warning("Refusing path outside static root: %s", path)
            raise PermissionError(errno.EACCES, "Path escapes static root", path)
        return target

    def open(self, path: str) -> OSFile | NonRegularHandle:
        target = self._resolve(path)
        st = target.stat()
        if not stat.S_ISREG(st.st_mode):
            # Directories, FIFOs and devices are never opened.
            return NonRegularHandle(path, datetime.fromtimestamp(st.st_mtime, UTC))
        return OSFile(target.open("rb"), target.name)
