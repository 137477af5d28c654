"""Immutable HTTP request.

Frozen metadata built once from the ASGI scope. The static handler never
reads a request body, so none is exposed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from spaserve.http.headers import Headers

# Characters left untouched when escaping a fragment (RFC 3986 fragment
# grammar, plus "%" so already-escaped octets survive).
_FRAGMENT_SAFE = "!$&'()*+,;=:@/?~%"


def escape_fragment(fragment: str) -> str:
    """Return the escaped form of a URL fragment."""
    return quote(fragment, safe=_FRAGMENT_SAFE)


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path`` is the percent-decoded request path as delivered by the ASGI
    server. ``raw_query`` is the undecoded query string and ``fragment``
    the escaped fragment (clients rarely send one; it is empty then).
    """

    method: str
    path: str
    headers: Headers
    raw_query: str = ""
    fragment: str = ""
    http_version: str = "1.1"
    client: tuple[str, int] | None = None

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.raw_query:
            return f"{self.path}?{self.raw_query}"
        return self.path

    @property
    def is_head(self) -> bool:
        return self.method == "HEAD"

    @classmethod
    def from_asgi(cls, scope: dict[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        # Fragments are not part of ASGI. A server that forwards the raw
        # request target leaves one at the end of raw_path or query_string.
        raw_path = scope.get("raw_path") or b""
        query, _, fragment = scope.get("query_string", b"").partition(b"#")
        path = scope["path"]
        if b"#" in raw_path:
            path = path.partition("#")[0]
            if not fragment:
                fragment = raw_path.partition(b"#")[2]
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=path,
            headers=Headers(tuple(scope.get("headers", ()))),
            raw_query=query.decode("latin-1"),
            fragment=escape_fragment(fragment.decode("latin-1")),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
        )
