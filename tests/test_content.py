"""Tests for the content responder: validators, preconditions, ranges, types."""

from datetime import UTC, datetime

import pytest

from spaserve.fs.memory import BytesFile
from spaserve.http.content import (
    ByteRange,
    RangeError,
    guess_content_type,
    make_etag,
    parse_range,
    serve_content,
    sniff_content_type,
)
from spaserve.http.headers import Headers
from spaserve.http.request import Request

DIGITS = b"0123456789"
MODIFIED = datetime(2024, 6, 15, 10, 0, 0, tzinfo=UTC)
MODIFIED_HTTP = "Sat, 15 Jun 2024 10:00:00 GMT"
EARLIER_HTTP = "Fri, 14 Jun 2024 10:00:00 GMT"
LATER_HTTP = "Sun, 16 Jun 2024 10:00:00 GMT"
ETAG = make_etag(MODIFIED, len(DIGITS))


def _serve(
    headers: dict[str, str] | None = None,
    *,
    method: str = "GET",
    name: str = "digits.txt",
    data: bytes = DIGITS,
    modified: datetime | None = MODIFIED,
):
    request = Request(
        method=method,
        path="/" + name,
        headers=Headers((k.encode(), v.encode("latin-1")) for k, v in (headers or {}).items()),
    )
    file = BytesFile("/" + name, data, modified)
    return serve_content(request, name, modified, len(data), file)


class TestFullResponse:
    def test_whole_file(self) -> None:
        response = _serve()
        assert response.status == 200
        assert response.body == DIGITS
        assert response.content_length == len(DIGITS)
        assert response.content_type == "text/plain; charset=utf-8"
        assert response.header("Accept-Ranges") == "bytes"

    def test_validators(self) -> None:
        response = _serve()
        assert response.header("Last-Modified") == MODIFIED_HTTP
        assert response.header("ETag") == ETAG

    def test_no_validators_without_modification_time(self) -> None:
        response = _serve(modified=None)
        assert response.status == 200
        assert response.header("Last-Modified") is None
        assert response.header("ETag") is None

    def test_head_has_length_no_body(self) -> None:
        response = _serve(method="HEAD")
        assert response.status == 200
        assert response.body == b""
        assert response.content_length == len(DIGITS)


class TestConditionalRequests:
    def test_if_none_match_hit_is_304(self) -> None:
        response = _serve({"If-None-Match": ETAG})
        assert response.status == 304
        assert response.body == b""
        assert response.content_type is None
        assert response.header("ETag") == ETAG
        assert response.header("Last-Modified") is None

    def test_if_none_match_weak_comparison(self) -> None:
        assert _serve({"If-None-Match": f"W/{ETAG}"}).status == 304

    def test_if_none_match_wildcard(self) -> None:
        assert _serve({"If-None-Match": "*"}).status == 304

    def test_if_none_match_list(self) -> None:
        assert _serve({"If-None-Match": f'"other", {ETAG}'}).status == 304

    def test_if_none_match_miss_is_200(self) -> None:
        assert _serve({"If-None-Match": '"stale"'}).status == 200

    def test_if_none_match_hit_on_post_is_412(self) -> None:
        assert _serve({"If-None-Match": ETAG}, method="POST").status == 412

    def test_if_modified_since_unchanged_is_304(self) -> None:
        response = _serve({"If-Modified-Since": MODIFIED_HTTP})
        assert response.status == 304
        assert response.header("Last-Modified") is None

    def test_if_modified_since_compares_whole_seconds(self) -> None:
        modified = MODIFIED.replace(microsecond=900000)
        response = _serve({"If-Modified-Since": MODIFIED_HTTP}, modified=modified)
        assert response.status == 304

    def test_if_modified_since_changed_is_200(self) -> None:
        assert _serve({"If-Modified-Since": EARLIER_HTTP}).status == 200

    def test_if_modified_since_ignored_when_if_none_match_present(self) -> None:
        headers = {"If-None-Match": '"stale"', "If-Modified-Since": MODIFIED_HTTP}
        assert _serve(headers).status == 200

    def test_invalid_date_is_ignored(self) -> None:
        assert _serve({"If-Modified-Since": "yesterday"}).status == 200

    def test_if_match_miss_is_412(self) -> None:
        assert _serve({"If-Match": '"other"'}).status == 412

    def test_if_match_hit_is_200(self) -> None:
        assert _serve({"If-Match": ETAG}).status == 200

    def test_if_match_wildcard(self) -> None:
        assert _serve({"If-Match": "*"}).status == 200

    def test_if_match_requires_strong_comparison(self) -> None:
        assert _serve({"If-Match": f"W/{ETAG}"}).status == 412

    def test_if_unmodified_since_earlier_is_412(self) -> None:
        assert _serve({"If-Unmodified-Since": EARLIER_HTTP}).status == 412

    def test_if_unmodified_since_later_is_200(self) -> None:
        assert _serve({"If-Unmodified-Since": LATER_HTTP}).status == 200

    def test_if_match_takes_precedence_over_if_unmodified_since(self) -> None:
        headers = {"If-Match": ETAG, "If-Unmodified-Since": EARLIER_HTTP}
        assert _serve(headers).status == 200


class TestRanges:
    def test_single_range(self) -> None:
        response = _serve({"Range": "bytes=0-4"})
        assert response.status == 206
        assert response.body == b"01234"
        assert response.header("Content-Range") == "bytes 0-4/10"
        assert response.content_length == 5

    def test_suffix_range(self) -> None:
        response = _serve({"Range": "bytes=-3"})
        assert response.status == 206
        assert response.body == b"789"
        assert response.header("Content-Range") == "bytes 7-9/10"

    def test_open_ended_range(self) -> None:
        response = _serve({"Range": "bytes=7-"})
        assert response.body == b"789"

    def test_end_is_clamped(self) -> None:
        response = _serve({"Range": "bytes=5-100"})
        assert response.status == 206
        assert response.body == b"56789"
        assert response.header("Content-Range") == "bytes 5-9/10"

    def test_multiple_ranges(self) -> None:
        response = _serve({"Range": "bytes=0-1,5-6"})
        assert response.status == 206
        assert response.content_type.startswith("multipart/byteranges; boundary=")
        boundary = response.content_type.partition("boundary=")[2]
        body = response.body
        assert body.startswith(f"--{boundary}\r\n".encode())
        assert body.endswith(f"\r\n--{boundary}--\r\n".encode())
        assert b"Content-Range: bytes 0-1/10\r\n" in body
        assert b"Content-Range: bytes 5-6/10\r\n" in body
        assert b"\r\n\r\n01\r\n" in body
        assert b"\r\n\r\n56\r\n" in body
        assert response.content_length == len(body)

    def test_unsatisfiable_range_is_416(self) -> None:
        response = _serve({"Range": "bytes=20-30"})
        assert response.status == 416
        assert response.header("Content-Range") == "bytes */10"
        assert response.header("X-Content-Type-Options") == "nosniff"

    @pytest.mark.parametrize(
        "header",
        ["bytes=abc", "items=0-1", "bytes=5-2", "bytes=1", "bytes=Â²-5", "bytes=-Â¹", "bytes=0-Â³"],
    )
    def test_malformed_range_is_416(self, header) -> None:
        response = _serve({"Range": header})
        assert response.status == 416
        assert response.header("Content-Range") is None

    def test_oversized_ranges_serve_whole_file(self) -> None:
        response = _serve({"Range": "bytes=0-9,0-9"})
        assert response.status == 200
        assert response.body == DIGITS

    def test_head_range(self) -> None:
        response = _serve({"Range": "bytes=0-2"}, method="HEAD")
        assert response.status == 206
        assert response.body == b""
        assert response.content_length == 3

    def test_if_range_matching_etag(self) -> None:
        response = _serve({"Range": "bytes=0-1", "If-Range": ETAG})
        assert response.status == 206

    def test_if_range_stale_etag_serves_whole_file(self) -> None:
        response = _serve({"Range": "bytes=0-1", "If-Range": '"stale"'})
        assert response.status == 200
        assert response.body == DIGITS

    def test_if_range_matching_date(self) -> None:
        response = _serve({"Range": "bytes=0-1", "If-Range": MODIFIED_HTTP})
        assert response.status == 206

    def test_if_range_stale_date(self) -> None:
        response = _serve({"Range": "bytes=0-1", "If-Range": EARLIER_HTTP})
        assert response.status == 200


class TestParseRange:
    def test_empty_header(self) -> None:
        assert parse_range("", 10) == []

    def test_ranges(self) -> None:
        assert parse_range("bytes=0-0, -2", 10) == [ByteRange(0, 1), ByteRange(8, 2)]

    def test_partial_overlap_keeps_satisfiable(self) -> None:
        assert parse_range("bytes=50-60,0-1", 10) == [ByteRange(0, 2)]

    def test_zero_length_suffix_does_not_overlap(self) -> None:
        with pytest.raises(RangeError) as info:
            parse_range("bytes=-0", 10)
        assert info.value.no_overlap

    def test_malformed_is_not_no_overlap(self) -> None:
        with pytest.raises(RangeError) as info:
            parse_range("bytes=x-", 10)
        assert not info.value.no_overlap

    @pytest.mark.parametrize("header", ["bytes=²-5", "bytes=-¹", "bytes=٣-"])
    def test_non_ascii_digits_are_malformed(self, header) -> None:
        with pytest.raises(RangeError):
            parse_range(header, 10)


class TestContentType:
    def test_extension_wins(self) -> None:
        response = _serve(name="page.html", data=b"not really html")
        assert response.content_type == "text/html; charset=utf-8"

    def test_javascript_gets_charset(self) -> None:
        content_type = guess_content_type("app.js")
        assert content_type is not None
        assert "javascript" in content_type
        assert content_type.endswith("; charset=utf-8")

    def test_binary_types_have_no_charset(self) -> None:
        assert guess_content_type("logo.png") == "image/png"

    def test_unknown_extension(self) -> None:
        assert guess_content_type("blob.unknownext") is None

    def test_sniffed_html_body_is_complete(self) -> None:
        data = b"<!DOCTYPE html><title>x</title>"
        response = _serve(name="entry", data=data)
        assert response.content_type == "text/html; charset=utf-8"
        assert response.body == data

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            (b"  <html><body>", "text/html; charset=utf-8"),
            (b"<?xml version='1.0'?>", "text/xml; charset=utf-8"),
            (b"\x89PNG\r\n\x1a\n\x00\x00", "image/png"),
            (b"%PDF-1.7", "application/pdf"),
            (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"\x00\x01\x02\x03", "application/octet-stream"),
            (b"just some words", "text/plain; charset=utf-8"),
            (b"<htmlish>", "text/plain; charset=utf-8"),
        ],
    )
    def test_sniff(self, data, expected) -> None:
        assert sniff_content_type(data) == expected


class TestMakeEtag:
    def test_changes_with_size(self) -> None:
        assert make_etag(MODIFIED, 1) != make_etag(MODIFIED, 2)

    def test_is_strong(self) -> None:
        etag = make_etag(MODIFIED, 10)
        assert etag is not None
        assert etag.startswith('"')
        assert etag.endswith('"')

    def test_epoch_has_no_etag(self) -> None:
        assert make_etag(datetime(1970, 1, 1, tzinfo=UTC), 10) is None
