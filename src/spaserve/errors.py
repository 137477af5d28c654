"""spaserve exception hierarchy and lookup error classification.

Filesystem backends raise the builtin ``OSError`` family. The handler
classifies those into "recoverable through the fallback document" and
"fatal", so backends never need to know about fallback policy.
"""

import errno
from dataclasses import dataclass


class SpaServeError(Exception):
    """Base for all spaserve-specific errors."""


class ConfigurationError(SpaServeError):
    """Raised when handler, filesystem, or server configuration is invalid.

    Typically raised while constructing ``HandlerConfig`` or a filesystem
    backend, before any request is served.
    """


@dataclass(frozen=True, slots=True)
class FallbackUnavailable(SpaServeError):  # noqa: N818
    """The fallback document could not be opened, stat'ed, or is not a file.

    A missing fallback is an operator mistake, never a client-facing
    condition, so the handler answers with a generic 500.
    """

    path: str
    reason: str = ""

    def __str__(self) -> str:
        if self.reason:
            return f"fallback {self.path!r} unavailable: {self.reason}"
        return f"fallback {self.path!r} unavailable"


# Absent entries, a path prefix that is a regular file, and permission
# denials all behave as "no such asset" for fallback purposes.
FALLBACK_ELIGIBLE: tuple[type[BaseException], ...] = (
    FileNotFoundError,
    NotADirectoryError,
    PermissionError,
)


def is_fallback_eligible(exc: BaseException) -> bool:
    """True if *exc* is a not-found-class lookup failure.

    Anything else (a genuine I/O failure, a backend bug) must surface as a
    server error instead of being masked by the fallback document.
    """
    return isinstance(exc, FALLBACK_ELIGIBLE)


def not_found(path: str, reason: str = "No such file or directory") -> FileNotFoundError:
    """Build the canonical not-found error for *path*."""
    return FileNotFoundError(errno.ENOENT, reason, path)
