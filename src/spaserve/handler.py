"""Static file handler with single-page-application fallback.

Serves regular files from a ``FileSystem``. Anything that does not resolve
to a regular file (missing paths, directories, trailing-slash paths,
permission denials) is answered with the fallback document instead, so a
client-side router receives its entry page for every unknown URL.

Per request, exactly one outcome:

    normalize path
      ├─ ends in /index.html (redirect enabled) → 301 Location: ./
      ├─ regular file found                      → content responder
      └─ lookup failed
           ├─ not found / permission denied → fallback → content responder
           │                                            └─ unavailable → 500
           └─ any other error               → 500

Filesystem work runs in a worker thread; the handler holds no mutable
state and is safe to share across concurrent requests.
"""

from __future__ import annotations

import logging
from dataclasses import replace

import anyio.to_thread

from spaserve._internal.asgi import Receive, Scope, Send
from spaserve.config import HandlerConfig, clean_path
from spaserve.errors import (
    ConfigurationError,
    FallbackUnavailable,
    is_fallback_eligible,
    not_found,
)
from spaserve.fs.protocol import File, FileInfo, FileSystem
from spaserve.http.content import serve_content
from spaserve.http.request import Request
from spaserve.http.response import Response
from spaserve.server.errors import internal_error
from spaserve.server.sender import send_response

logger = logging.getLogger("spaserve.handler")

INDEX_SUFFIX = "/index.html"


def normalize_path(path: str) -> str:
    """Make *path* absolute. No other transformation happens here."""
    if not path.startswith("/"):
        return "/" + path
    return path


def index_redirect(request: Request) -> Response:
    """301 to ``./``, preserving the query string and fragment."""
    location = "./"
    if request.raw_query:
        location += "?" + request.raw_query
    if request.fragment:
        location += "#" + request.fragment
    return Response(status=301).with_header("Location", location)


class StaticHandler:
    """ASGI application serving a file tree with an SPA fallback document.

    Usage::

        handler = StaticHandler(DirFileSystem("./dist"))

        # Custom fallback, no index redirect
        handler = StaticHandler(
            DirFileSystem("./dist"),
            fallback="/app.html",
            index_redirect=False,
        )

    Keyword overrides are applied on top of ``config`` (default
    ``HandlerConfig()``). The configuration is immutable afterwards.
    """

    __slots__ = ("_config", "_fs")

    def __init__(
        self,
        fs: FileSystem,
        config: HandlerConfig | None = None,
        *,
        fallback: str | None = None,
        index_redirect: bool | None = None,
    ) -> None:
        if not isinstance(fs, FileSystem):
            msg = f"{type(fs).__name__} does not implement FileSystem (missing open())"
            raise ConfigurationError(msg)
        config = config or HandlerConfig()
        if fallback is not None:
            config = config.with_fallback(fallback)
        if index_redirect is not None:
            config = replace(config, index_redirect=index_redirect)
        self._fs = fs
        self._config = config

    @property
    def fs(self) -> FileSystem:
        return self._fs

    @property
    def config(self) -> HandlerConfig:
        return self._config

    def __repr__(self) -> str:
        return f"StaticHandler({self._fs!r}, {self._config!r})"

    # ------------------------------------------------------------------
    # ASGI
    # ------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI entry point: lifespan is acknowledged, HTTP is served."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        request = Request.from_asgi(scope)
        response = await self.handle(request)
        await send_response(response, send)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        # Nothing to set up: the handler is ready as soon as it exists.
        while True:
            message = await receive()
            msg_type = message["type"]
            if msg_type == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def handle(self, request: Request) -> Response:
        """Serve *request* without blocking the event loop on file I/O."""
        return await anyio.to_thread.run_sync(self.serve, request)

    # ------------------------------------------------------------------
    # Request pipeline
    # ------------------------------------------------------------------

    def serve(self, request: Request) -> Response:
        """Resolve *request* to a response. Blocking; safe from any thread."""
        path = normalize_path(request.path)

        if self._config.index_redirect and path.endswith(INDEX_SUFFIX):
            logger.debug("301 %s %s -> ./", request.method, path)
            return index_redirect(request)

        try:
            if path != "/" and path.endswith("/"):
                # Directory-style URLs never list; they go to the fallback.
                raise not_found(path)
            file, info = self._open(clean_path(path))
        except Exception as exc:
            return self._handle_lookup_error(request, path, exc)

        with file:
            return self._respond(request, file, info)

    def _open(self, path: str) -> tuple[File, FileInfo]:
        """Open *path* and require a regular file. Closes on failure."""
        file = self._fs.open(path)
        try:
            info = file.stat()
            if not info.is_regular:
                raise not_found(path, "Not a regular file")
        except BaseException:
            file.close()
            raise
        return file, info

    def _open_fallback(self) -> tuple[File, FileInfo]:
        fallback = self._config.fallback
        try:
            return self._open(fallback)
        except Exception as exc:
            raise FallbackUnavailable(fallback, reason=str(exc)) from exc

    def _handle_lookup_error(self, request: Request, path: str, exc: Exception) -> Response:
        if not is_fallback_eligible(exc):
            logger.error(
                "500 %s %s: lookup failed",
                request.method,
                path,
                exc_info=exc,
            )
            return internal_error()

        if not self._config.fallback_enabled:
            logger.debug("500 %s %s: no fallback configured (%s)", request.method, path, exc)
            return internal_error()

        try:
            file, info = self._open_fallback()
        except FallbackUnavailable as unavailable:
            logger.error("500 %s %s: %s", request.method, path, unavailable)
            return internal_error()

        logger.debug("%s %s -> fallback %s", request.method, path, self._config.fallback)
        with file:
            return self._respond(request, file, info)

    def _respond(self, request: Request, file: File, info: FileInfo) -> Response:
        try:
            return serve_content(request, info.name, info.modified, info.size, file)
        except Exception:
            logger.exception("500 %s %s: failed to read %s", request.method, request.path, info.name)
            return internal_error()

