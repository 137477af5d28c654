"""In-memory filesystem.

Useful for tests and for assets generated at startup. Directories are
implied by file paths: ``/dir/test.js`` makes ``/dir`` a directory.
"""

from __future__ import annotations

import errno
import io
import posixpath
from collections.abc import Mapping
from datetime import UTC, datetime

from spaserve.config import clean_path
from spaserve.errors import not_found
from spaserve.fs.protocol import FileInfo, NonRegularHandle


class BytesFile:
    """A readable, seekable handle over an immutable byte string."""

    __slots__ = ("_buffer", "_info")

    def __init__(self, path: str, data: bytes, modified: datetime | None = None) -> None:
        self._buffer = io.BytesIO(data)
        self._info = FileInfo(
            name=posixpath.basename(path),
            size=len(data),
            modified=modified,
            is_regular=True,
        )

    def stat(self) -> FileInfo:
        return self._info

    def read(self, size: int = -1, /) -> bytes:
        return self._buffer.read(size)

    def seek(self, offset: int, whence: int = 0, /) -> int:
        return self._buffer.seek(offset, whence)

    def close(self) -> None:
        self._buffer.close()

    @property
    def closed(self) -> bool:
        return self._buffer.closed

    def __enter__(self) -> BytesFile:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class MemoryFileSystem:
    """A virtual file tree held in a dict.

    Usage::

        fs = MemoryFileSystem({
            "/index.html": "<h1>App</h1>",
            "/assets/app.js": b"console.log(1)",
        })

    Keys are cleaned into absolute paths; ``str`` values are UTF-8 encoded.
    All files share one modification time (default: construction time).
    """

    __slots__ = ("_dirs", "_files", "_modified")

    def __init__(
        self,
        files: Mapping[str, str | bytes],
        *,
        modified: datetime | None = None,
    ) -> None:
        self._modified = modified or datetime.now(UTC).replace(microsecond=0)
        self._files: dict[str, bytes] = {}
        self._dirs: set[str] = {"/"}
        for raw_path, data in files.items():
            path = clean_path(raw_path)
            self._files[path] = data.encode("utf-8") if isinstance(data, str) else bytes(data)
            parent = posixpath.dirname(path)
            while parent not in self._dirs:
                self._dirs.add(parent)
                parent = posixpath.dirname(parent)

    def open(self, path: str) -> BytesFile | NonRegularHandle:
        path = clean_path(path)
        data = self._files.get(path)
        if data is not None:
            return BytesFile(path, data, self._modified)
        if path in self._dirs:
            return NonRegularHandle(path, self._modified)
        parent = posixpath.dirname(path)
        while parent != "/":
            if parent in self._files:
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", path)
            parent = posixpath.dirname(parent)
        raise not_found(path)
