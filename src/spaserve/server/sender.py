"""ASGI response sending: translates a spaserve Response into ASGI messages."""

from spaserve._internal.asgi import Send
from spaserve.http.response import Response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def encode_headers(response: Response) -> list[tuple[bytes, bytes]]:
    """Build the raw ASGI header list for *response*."""
    raw_headers: list[tuple[bytes, bytes]] = []
    if response.content_type is not None:
        raw_headers.append((b"content-type", response.content_type.encode("latin-1")))
    for name, value in response.headers:
        lowered = name.lower()
        if lowered in ("content-type", "content-length"):
            continue
        raw_headers.append((lowered.encode("latin-1"), value.encode("latin-1")))

    if _body_allowed(response.status):
        length = response.content_length
        if length is None:
            length = len(response.body_bytes)
        raw_headers.append((b"content-length", str(length).encode("latin-1")))
    return raw_headers


async def send_response(response: Response, send: Send) -> None:
    """Translate a spaserve Response into ASGI send() calls."""
    body = response.body_bytes if _body_allowed(response.status) else b""
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": encode_headers(response),
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
