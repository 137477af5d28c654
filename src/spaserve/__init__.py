"""spaserve: static files with a single-page-application fallback.

Serves real files from a file tree and answers every other path with an
entry document (``/index.html`` by default), so client-side routers get
their page for any URL.

Basic usage::

    from spaserve import DirFileSystem, StaticHandler

    app = StaticHandler(DirFileSystem("./dist"))  # any ASGI server

Custom fallback, index redirect disabled::

    app = StaticHandler(
        DirFileSystem("./dist"),
        fallback="/app.html",
        index_redirect=False,
    )
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "DirFileSystem",
    "FallbackUnavailable",
    "FileInfo",
    "FileSystem",
    "HandlerConfig",
    "MemoryFileSystem",
    "PackageFileSystem",
    "Request",
    "Response",
    "ServerConfig",
    "SpaServeError",
    "StaticHandler",
    "serve_content",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import spaserve`` fast while providing a clean top-level API.
    """
    if name == "StaticHandler":
        from spaserve.handler import StaticHandler

        return StaticHandler

    if name in ("HandlerConfig", "ServerConfig"):
        from spaserve import config as _config

        return getattr(_config, name)

    if name in ("DirFileSystem", "FileInfo", "FileSystem", "MemoryFileSystem", "PackageFileSystem"):
        from spaserve import fs as _fs

        return getattr(_fs, name)

    if name == "Request":
        from spaserve.http.request import Request

        return Request

    if name == "Response":
        from spaserve.http.response import Response

        return Response

    if name == "serve_content":
        from spaserve.http.content import serve_content

        return serve_content

    if name in ("ConfigurationError", "FallbackUnavailable", "SpaServeError"):
        from spaserve import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
