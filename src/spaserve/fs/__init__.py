"""Filesystem backends for the static handler.

Backends:
    DirFileSystem -- Files below a directory on disk
    MemoryFileSystem -- Virtual in-memory tree (tests, generated assets)
    PackageFileSystem -- Assets embedded in an importable package
"""

from spaserve.fs.directory import DirFileSystem
from spaserve.fs.memory import MemoryFileSystem
from spaserve.fs.package import PackageFileSystem
from spaserve.fs.protocol import File, FileInfo, FileSystem

__all__ = [
    "DirFileSystem",
    "File",
    "FileInfo",
    "FileSystem",
    "MemoryFileSystem",
    "PackageFileSystem",
]
