"""Filesystem over assets embedded in an importable Python package.

Wraps ``importlib.resources`` so a built frontend can ship inside a wheel
(including zipped installs) and be served without touching the working
directory.
"""

from __future__ import annotations

import errno
from datetime import datetime
from importlib.resources import files
from importlib.resources.abc import Traversable

from spaserve.config import clean_path
from spaserve.errors import ConfigurationError, not_found
from spaserve.fs.memory import BytesFile
from spaserve.fs.protocol import NonRegularHandle


class PackageFileSystem:
    """Read-only view of ``<package>/<subdir>``.

    Usage::

        fs = PackageFileSystem("myapp", "frontend/dist")

    Resources carry no reliable modification time, so one may be supplied
    (e.g. the build timestamp) to enable ``Last-Modified`` handling.
    """

    __slots__ = ("_modified", "_root")

    def __init__(
        self,
        package: str,
        subdir: str = "",
        *,
        modified: datetime | None = None,
    ) -> None:
        try:
            root = files(package)
        except ModuleNotFoundError as exc:
            msg = f"Cannot load assets from unknown package {package!r}"
            raise ConfigurationError(msg) from exc
        for part in subdir.strip("/").split("/"):
            if part:
                root = root.joinpath(part)
        if not root.is_dir():
            msg = f"Asset directory {subdir!r} not found in package {package!r}"
            raise ConfigurationError(msg)
        self._root: Traversable = root
        self._modified = modified

    def open(self, path: str) -> BytesFile | NonRegularHandle:
        path = clean_path(path)
        node = self._root
        for part in path.strip("/").split("/"):
            if not part:
                continue
            if node.is_file():
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", path)
            node = node.joinpath(part)
        if node.is_dir():
            return NonRegularHandle(path, self._modified)
        if not node.is_file():
            raise not_found(path)
        return BytesFile(path, node.read_bytes(), self._modified)
