"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body and status, then chain ``with_header`` /
    ``without_headers`` to adjust headers. Each call returns a new
    ``Response``.

    ``content_type=None`` sends no ``Content-Type`` header (redirects,
    ``304 Not Modified``). ``content_length`` overrides the length derived
    from the body, which ``HEAD`` responses need.
    """

    body: str | bytes = b""
    status: int = 200
    content_type: str | None = None
    headers: tuple[tuple[str, str], ...] = ()
    content_length: int | None = None

    # -- Chainable transformations --

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def without_headers(self, *names: str) -> Response:
        """Return a new Response with every header in *names* removed."""
        drop = {name.lower() for name in names}
        kept = tuple((n, v) for n, v in self.headers if n.lower() not in drop)
        return replace(self, headers=kept)

    # -- Accessors --

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value of header *name* (case-insensitive)."""
        key = name.lower()
        for n, v in self.headers:
            if n.lower() == key:
                return v
        return default

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body
