"""Handler and server configuration.

Both configs are frozen dataclasses: immutable after creation,
IDE-autocompletable, no string-key dict lookups. A handler reads its
config on every request without locking.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, replace

from spaserve.errors import ConfigurationError

_LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")


def clean_path(path: str) -> str:
    """Lexically clean an absolute URL path.

    Prepends ``/`` when missing, collapses duplicate separators and
    resolves ``.`` and ``..`` segments. ``..`` never climbs above ``/``.
    """
    if not path.startswith("/"):
        path = "/" + path
    cleaned = posixpath.normpath(path)
    # normpath keeps a leading "//" (POSIX allows it to be special)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


@dataclass(frozen=True, slots=True)
class HandlerConfig:
    """Static handler configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = HandlerConfig(fallback="/app.html", index_redirect=False)

    An empty ``fallback`` disables the fallback document entirely: lookup
    failures then become server errors.
    """

    fallback: str = "/index.html"
    index_redirect: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.fallback, str):
            msg = f"fallback must be a string, got {type(self.fallback).__name__}"
            raise ConfigurationError(msg)
        if self.fallback:
            object.__setattr__(self, "fallback", clean_path(self.fallback))

    @property
    def fallback_enabled(self) -> bool:
        return bool(self.fallback)

    # -- Chainable transformations --

    def with_fallback(self, path: str) -> HandlerConfig:
        """Return a new config serving *path* for unresolved requests."""
        return replace(self, fallback=path)

    def without_fallback(self) -> HandlerConfig:
        """Return a new config with the fallback document disabled."""
        return replace(self, fallback="")

    def without_index_redirect(self) -> HandlerConfig:
        """Return a new config that serves ``.../index.html`` directly."""
        return replace(self, index_redirect=False)


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Settings for ``spaserve serve``. Immutable after creation."""

    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"

    def __post_init__(self) -> None:
        level = self.log_level.lower()
        if level not in _LOG_LEVELS:
            msg = f"Unknown log level {self.log_level!r}. Expected one of: {', '.join(_LOG_LEVELS)}"
            raise ConfigurationError(msg)
        object.__setattr__(self, "log_level", level)
        if not 0 <= self.port <= 65535:
            msg = f"Port out of range: {self.port}"
            raise ConfigurationError(msg)
