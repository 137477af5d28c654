"""Generic error responses.

Error bodies never include exception details or tracebacks: the client
sees the status text and nothing else. Details go to the log.
"""

from http import HTTPStatus

from spaserve.http.response import Response


def error_response(status: int = 500) -> Response:
    """Plain-text response whose body is the reason phrase for *status*."""
    try:
        phrase = HTTPStatus(status).phrase
    except ValueError:
        phrase = "Error"
    return Response(
        body=f"{phrase}\n",
        status=status,
        content_type="text/plain; charset=utf-8",
        headers=(("X-Content-Type-Options", "nosniff"),),
    )


def internal_error() -> Response:
    """The ``500 Internal Server Error`` every unrecoverable lookup ends in."""
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)
