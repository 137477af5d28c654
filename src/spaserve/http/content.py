"""Content responder: turns an open file into a range- and cache-aware Response.

Given a readable, seekable file plus its name, size and modification time,
``serve_content`` decides the status and headers the way browsers and
caches expect:

    1. Preconditions (RFC 9110 §13.2.2 order)
       If-Match → If-Unmodified-Since → If-None-Match → If-Modified-Since
       → 412 Precondition Failed or 304 Not Modified
    2. If-Range → drop the Range header when the validator is stale
    3. Range → 206 Partial Content (single or multipart/byteranges)
       or 416 Range Not Satisfiable
    4. Otherwise → 200 with the whole file

Content type comes from the file extension, falling back to sniffing the
first 512 bytes. ``HEAD`` responses carry headers and Content-Length but
no body.

The function reads what it needs and returns; closing the file is the
caller's job.
"""

from __future__ import annotations

import mimetypes
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime

from spaserve.fs.protocol import File
from spaserve.http.request import Request
from spaserve.http.response import Response

SNIFF_LEN = 512

_TEXT_LIKE = ("application/javascript", "application/json", "application/xml", "image/svg+xml")

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class RangeError(ValueError):
    """The Range header is malformed or none of its ranges overlap the file."""

    def __init__(self, message: str, *, no_overlap: bool = False) -> None:
        super().__init__(message)
        self.no_overlap = no_overlap


@dataclass(frozen=True, slots=True)
class ByteRange:
    start: int
    length: int

    def content_range(self, size: int) -> str:
        return f"bytes {self.start}-{self.start + self.length - 1}/{size}"


# ---------------------------------------------------------------------------
# Content type
# ---------------------------------------------------------------------------

_HTML_SIGNATURES = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

_MAGIC = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"BM", "image/bmp"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"\x00asm", "application/wasm"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", "text/plain; charset=utf-8"),
)

# Control bytes that never appear in text (everything below 0x20 except
# tab, newline, form feed, carriage return, and escape).
_BINARY_BYTES = frozenset(range(0x20)) - {0x09, 0x0A, 0x0C, 0x0D, 0x1B}


def sniff_content_type(data: bytes) -> str:
    """Guess a content type from the leading bytes of a file."""
    head = data[:SNIFF_LEN]
    stripped = head.lstrip(b"\t\n\x0c\r ")
    upper = stripped.upper()
    for signature in _HTML_SIGNATURES:
        if upper.startswith(signature):
            rest = stripped[len(signature) : len(signature) + 1]
            if rest in (b" ", b">"):
                return "text/html; charset=utf-8"
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    for magic, content_type in _MAGIC:
        if head.startswith(magic):
            return content_type
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "image/webp"
    if any(byte in _BINARY_BYTES for byte in head):
        return "application/octet-stream"
    return "text/plain; charset=utf-8"


def guess_content_type(name: str) -> str | None:
    """Content type for *name* by extension, with a UTF-8 charset for text."""
    content_type, _ = mimetypes.guess_type(name, strict=False)
    if content_type is None:
        return None
    if content_type.startswith("text/") or content_type in _TEXT_LIKE:
        return f"{content_type}; charset=utf-8"
    return content_type


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def make_etag(modified: datetime | None, size: int) -> str | None:
    """Strong validator from modification time (seconds) and size."""
    if modified is None or modified == _EPOCH:
        return None
    return f'"{int(modified.timestamp()):x}-{size:x}"'


def _parse_http_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_etags(value: str) -> list[str]:
    """Split an If-Match / If-None-Match header into entity tags.

    Returns ``["*"]`` for the wildcard. Parsing stops at the first
    malformed element.
    """
    tags: list[str] = []
    rest = value
    while True:
        rest = rest.lstrip(" \t,")
        if not rest:
            return tags
        if rest.startswith("*"):
            tags.append("*")
            rest = rest[1:]
            continue
        prefix = ""
        if rest.startswith("W/"):
            prefix, rest = "W/", rest[2:]
        if not rest.startswith('"'):
            return tags
        end = rest.find('"', 1)
        if end == -1:
            return tags
        tags.append(prefix + rest[: end + 1])
        rest = rest[end + 1 :]


def _strong_match(a: str | None, b: str) -> bool:
    return a is not None and a == b and not a.startswith("W/")


def _weak_match(a: str | None, b: str) -> bool:
    return a is not None and a.removeprefix("W/") == b.removeprefix("W/")


def _truncate(modified: datetime) -> datetime:
    return modified.replace(microsecond=0)


def _check_if_match(request: Request, etag: str | None) -> bool | None:
    header = request.headers.get("if-match")
    if header is None:
        return None
    for tag in _parse_etags(header):
        if tag == "*" or _strong_match(etag, tag):
            return True
    return False


def _check_if_unmodified_since(request: Request, modified: datetime | None) -> bool | None:
    if modified is None or modified == _EPOCH:
        return None
    since = _parse_http_date(request.headers.get("if-unmodified-since"))
    if since is None:
        return None
    return _truncate(modified) <= since


def _check_if_none_match(request: Request, etag: str | None) -> bool | None:
    header = request.headers.get("if-none-match")
    if header is None:
        return None
    for tag in _parse_etags(header):
        if tag == "*" or _weak_match(etag, tag):
            return False
    return True


def _check_if_modified_since(request: Request, modified: datetime | None) -> bool | None:
    if request.method not in ("GET", "HEAD"):
        return None
    if modified is None or modified == _EPOCH:
        return None
    since = _parse_http_date(request.headers.get("if-modified-since"))
    if since is None:
        return None
    return _truncate(modified) > since


def _check_if_range(request: Request, etag: str | None, modified: datetime | None) -> bool | None:
    if request.method not in ("GET", "HEAD"):
        return None
    header = request.headers.get("if-range")
    if not header:
        return None
    if header.startswith(('"', "W/")):
        tags = _parse_etags(header)
        return bool(tags) and _strong_match(etag, tags[0])
    if modified is None or modified == _EPOCH:
        return False
    since = _parse_http_date(header)
    return since is not None and _truncate(modified) == since


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------


def _is_number(text: str) -> bool:
    # str.isdigit() also accepts superscripts and other Unicode digits.
    return text.isascii() and text.isdigit()


def parse_range(header: str, size: int) -> list[ByteRange]:
    """Parse a ``Range: bytes=...`` header against a file of *size* bytes.

    Raises:
        RangeError: On malformed input, or with ``no_overlap=True`` when
            every range starts beyond the end of the file.
    """
    if not header:
        return []
    unit, sep, spec = header.partition("=")
    if not sep or unit.strip() != "bytes":
        raise RangeError("invalid range")
    ranges: list[ByteRange] = []
    no_overlap = False
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        first, dash, last = part.partition("-")
        if not dash:
            raise RangeError("invalid range")
        first, last = first.strip(), last.strip()
        if not first:
            # Suffix range: the final N bytes.
            if not _is_number(last):
                raise RangeError("invalid range")
            length = min(int(last), size)
            if length == 0:
                no_overlap = True
                continue
            ranges.append(ByteRange(start=size - length, length=length))
            continue
        if not _is_number(first):
            raise RangeError("invalid range")
        start = int(first)
        if start >= size:
            no_overlap = True
            continue
        if not last:
            ranges.append(ByteRange(start=start, length=size - start))
            continue
        if not _is_number(last) or start > int(last):
            raise RangeError("invalid range")
        end = min(int(last), size - 1)
        ranges.append(ByteRange(start=start, length=end - start + 1))
    if no_overlap and not ranges:
        raise RangeError("invalid range: failed to overlap", no_overlap=True)
    return ranges


def _read_range(file: File, byte_range: ByteRange) -> bytes:
    file.seek(byte_range.start)
    return file.read(byte_range.length)


def _multipart_body(
    file: File,
    ranges: list[ByteRange],
    size: int,
    content_type: str,
    boundary: str,
) -> bytes:
    parts: list[bytes] = []
    for byte_range in ranges:
        head = (
            f"--{boundary}\r\n"
            f"Content-Range: {byte_range.content_range(size)}\r\n"
            f"Content-Type: {content_type}\r\n\r\n"
        ).encode("latin-1")
        parts.append(head + _read_range(file, byte_range))
    return b"\r\n".join(parts) + f"\r\n--{boundary}--\r\n".encode("latin-1")


# ---------------------------------------------------------------------------
# Responder
# ---------------------------------------------------------------------------


def _not_modified(headers: list[tuple[str, str]], etag: str | None) -> Response:
    # A 304 carries validators only; Last-Modified is redundant next to an ETag.
    response = Response(status=304, headers=tuple(headers))
    if etag is not None:
        response = response.without_headers("Last-Modified")
    return response


def serve_content(
    request: Request,
    name: str,
    modified: datetime | None,
    size: int,
    file: File,
) -> Response:
    """Build the response for *file* honoring conditional and Range headers."""
    etag = make_etag(modified, size)
    headers: list[tuple[str, str]] = []
    if modified is not None and modified != _EPOCH:
        headers.append(("Last-Modified", format_datetime(modified.astimezone(UTC), usegmt=True)))
    if etag is not None:
        headers.append(("ETag", etag))

    # -- Preconditions --
    matched = _check_if_match(request, etag)
    if matched is None:
        matched = _check_if_unmodified_since(request, modified)
    if matched is False:
        return Response(status=412)

    none_match = _check_if_none_match(request, etag)
    if none_match is False:
        if request.method in ("GET", "HEAD"):
            return _not_modified(headers, etag)
        return Response(status=412)
    if none_match is None and _check_if_modified_since(request, modified) is False:
        return _not_modified(headers, etag)

    range_header = request.headers.get("range", "")
    if range_header and _check_if_range(request, etag, modified) is False:
        range_header = ""

    # -- Content type --
    content_type = guess_content_type(name)
    if content_type is None:
        content_type = sniff_content_type(file.read(SNIFF_LEN))
        file.seek(0)

    # -- Ranges --
    try:
        ranges = parse_range(range_header, size)
    except RangeError as exc:
        response = Response(
            body=f"{exc}\n",
            status=416,
            content_type="text/plain; charset=utf-8",
        ).with_header("X-Content-Type-Options", "nosniff")
        if exc.no_overlap:
            response = response.with_header("Content-Range", f"bytes */{size}")
        return response
    if sum(r.length for r in ranges) > size:
        # Overlapping or abusive ranges: serve the whole file instead.
        ranges = []

    headers.append(("Accept-Ranges", "bytes"))
    status = 200
    if len(ranges) == 1:
        status = 206
        headers.append(("Content-Range", ranges[0].content_range(size)))
        body = b"" if request.is_head else _read_range(file, ranges[0])
        length = ranges[0].length
    elif ranges:
        status = 206
        boundary = secrets.token_hex(15)
        body = _multipart_body(file, ranges, size, content_type, boundary)
        content_type = f"multipart/byteranges; boundary={boundary}"
        length = len(body)
        if request.is_head:
            body = b""
    else:
        body = b"" if request.is_head else file.read()
        length = size if request.is_head else len(body)

    return Response(
        body=body,
        status=status,
        content_type=content_type,
        headers=tuple(headers),
        content_length=length,
    )
