"""Case-insensitive view of the request headers the content responder reads.

Decodes the raw ASGI byte pairs once, keyed by lowercase name. Repeated
fields are folded into one comma-separated value, the way HTTP defines
list-valued fields (``If-None-Match: "a"`` twice reads as ``"a", "a"``).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP request headers.

    Built from ASGI ``(name, value)`` byte pairs::

        headers = Headers([(b"range", b"bytes=0-99")])
        headers.get("Range")  # "bytes=0-99"
    """

    __slots__ = ("_fields",)

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        fields: dict[str, str] = {}
        for name, value in raw:
            key = name.decode("latin-1").lower()
            text = value.decode("latin-1").strip()
            fields[key] = f"{fields[key]}, {text}" if key in fields else text
        self._fields = fields

    def __getitem__(self, key: str) -> str:
        return self._fields[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Headers({self._fields!r})"
