"""Filesystem protocols and shared handle types.

A *filesystem* is anything that opens files by absolute, cleaned URL path
(``/assets/app.js``). The handler only ever calls two operations:

- ``fs.open(path)`` returns a ``File`` or raises from the ``OSError``
  family (``FileNotFoundError``, ``PermissionError``, ...)
- ``file.stat()`` returns a ``FileInfo``

Backends are structural: no base class required, the handler checks the
shape, not the lineage. Every backend must refuse paths that escape its
root on its own, independently of the handler's lexical cleaning.
"""

from __future__ import annotations

import errno
import posixpath
from dataclasses import dataclass
from datetime import datetime
from types import TracebackType
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Metadata for an opened entry.

    ``modified`` is a timezone-aware UTC datetime, or ``None`` when the
    backend has no meaningful modification time.
    """

    name: str
    size: int
    modified: datetime | None
    is_regular: bool


@runtime_checkable
class File(Protocol):
    """An open, seekable, read-only file handle."""

    def stat(self) -> FileInfo: ...
    def read(self, size: int = -1, /) -> bytes: ...
    def seek(self, offset: int, whence: int = 0, /) -> int: ...
    def close(self) -> None: ...
    def __enter__(self) -> File: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


@runtime_checkable
class FileSystem(Protocol):
    """A read-only hierarchical store opened by absolute path."""

    def open(self, path: str) -> File: ...


class NonRegularHandle:
    """Handle for a directory, FIFO or device: stat-able, never readable.

    The handler rejects non-regular entries before reading, so ``read``
    only guards against misuse.
    """

    __slots__ = ("_info",)

    def __init__(self, path: str, modified: datetime | None = None) -> None:
        self._info = FileInfo(
            name=posixpath.basename(path.rstrip("/")) or "/",
            size=0,
            modified=modified,
            is_regular=False,
        )

    def stat(self) -> FileInfo:
        return self._info

    def read(self, size: int = -1, /) -> bytes:
        raise OSError(errno.EINVAL, "Not a regular file", self._info.name)

    def seek(self, offset: int, whence: int = 0, /) -> int:
        raise OSError(errno.EINVAL, "Not a regular file", self._info.name)

    def close(self) -> None:
        pass

    def __enter__(self) -> NonRegularHandle:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
