from __future__ import annotations

import pytest

from upload_intake.backend.app.application.uploads.multipart_parser import (
    MultipartParser,
    ParserState,
    PartData,
    PartEnded,
    PartStarted,
    extract_boundary,
)
from upload_intake.backend.app.domain.uploads.errors import MalformedMultipart
from tests.unit.fakes.multipart import BOUNDARY, FieldPart, FilePart, build_multipart

B = BOUNDARY.encode()


def _parse(body: bytes, chunk_size: int, *, max_header_bytes: int = 16 * 1024) -> list[tuple[dict, bytes]]:
    parser = MultipartParser(B, max_header_bytes=max_header_bytes)
    parts: list[tuple[dict, bytes]] = []
    headers: dict | None = None
    data = bytearray()
    for i in range(0, len(body), chunk_size):
        for event in parser.feed(body[i:i + chunk_size]):
            if isinstance(event, PartStarted):
                headers, data = event.headers, bytearray()
            elif isinstance(event, PartData):
                data += event.data
            else:
                assert isinstance(event, PartEnded)
                parts.append((headers, bytes(data)))
    parser.finish()
    return parts


TRICKY_CONTENT = (
    b"line one\r\n"
    b"--not the boundary\r\n"
    b"\r\n--" + B[:-1] + b"X\r\n"
    b"\r\r\n\n--"
    b"ends with a carriage return\r"
)


@pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 64, 1024, 1_000_000])
def test_parts_are_independent_of_chunking(chunk_size):
    body = build_multipart(
        [
            FieldPart("title", "Holiday"),
            FilePart("userfile", "a.png", b"\x89PNG\r\n\x1a\n" + bytes(range(256)), "image/png"),
            FilePart("userdocuments", "b.pdf", TRICKY_CONTENT, "application/pdf"),
        ]
    )

    parts = _parse(body, chunk_size)

    assert len(parts) == 3
    assert parts[0][0] == {"content-disposition": 'form-data; name="title"'}
    assert parts[0][1] == b"Holiday"
    assert parts[1][0]["content-type"] == "image/png"
    assert parts[1][1] == b"\x89PNG\r\n\x1a\n" + bytes(range(256))
    assert parts[2][0]["content-disposition"] == 'form-data; name="userdocuments"; filename="b.pdf"'
    assert parts[2][1] == TRICKY_CONTENT


def test_preamble_and_epilogue_are_ignored():
    body = (
        b"This is the preamble.\r\n"
        + build_multipart([FieldPart("a", "1")])
        + b"this is the epilogue --" + B + b"\r\n"
    )

    parts = _parse(body, 5)

    assert parts == [({"content-disposition": 'form-data; name="a"'}, b"1")]


def test_transport_padding_after_boundary_is_allowed():
    body = (
        b"--" + B + b" \t \r\n"
        b'Content-Disposition: form-data; name="a"\r\n\r\n'
        b"value\r\n"
        b"--" + B + b"--"
    )

    assert _parse(body, 4) == [({"content-disposition": 'form-data; name="a"'}, b"value")]


def test_part_without_headers_and_empty_body():
    body = b"--" + B + b"\r\n\r\n\r\n--" + B + b"--\r\n"

    assert _parse(body, 1) == [({}, b"")]


def test_folded_header_lines_are_joined():
    body = (
        b"--" + B + b"\r\n"
        b"Content-Disposition: form-data;\r\n"
        b' name="folded"\r\n\r\n'
        b"x\r\n"
        b"--" + B + b"--"
    )

    [(headers, data)] = _parse(body, 1000)

    assert headers == {"content-disposition": 'form-data; name="folded"'}
    assert data == b"x"


def test_body_bytes_are_streamed_before_the_part_ends():
    parser = MultipartParser(B)
    head = b"--" + B + b'\r\nContent-Disposition: form-data; name="f"; filename="f.bin"\r\n\r\n'

    events = parser.feed(head + b"x" * 10_000)

    streamed = sum(len(e.data) for e in events if isinstance(e, PartData))
    assert isinstance(events[0], PartStarted)
    assert not any(isinstance(e, PartEnded) for e in events)
    assert streamed == 10_000
    assert parser.state is ParserState.STREAMING_BODY


def test_data_after_terminal_boundary_is_dropped():
    parser = MultipartParser(B)
    parser.feed(build_multipart([FieldPart("a", "1")]))

    assert parser.state is ParserState.DONE
    assert parser.feed(b"--" + B + b"\r\nmore") == []
    parser.finish()


def test_missing_boundary_is_malformed():
    parser = MultipartParser(B)
    parser.feed(b"just some bytes, no multipart here")

    with pytest.raises(MalformedMultipart):
        parser.finish()


def test_truncated_body_is_malformed():
    body = build_multipart([FilePart("f", "a.bin", b"x" * 100)])

    with pytest.raises(MalformedMultipart):
        _parse(body[:-30], 16)


def test_garbage_after_boundary_is_malformed():
    body = b"--" + B + b"garbage\r\n" b'Content-Disposition: form-data; name="a"\r\n\r\nx\r\n--' + B + b"--"

    with pytest.raises(MalformedMultipart):
        _parse(body, 1000)


def test_header_line_without_colon_is_malformed():
    body = b"--" + B + b"\r\nthis is not a header\r\n\r\nx\r\n--" + B + b"--"

    with pytest.raises(MalformedMultipart):
        _parse(body, 1000)


@pytest.mark.parametrize("chunk_size", [8, 100_000])
def test_oversized_header_block_is_malformed(chunk_size):
    body = (
        b"--" + B + b"\r\n"
        b'Content-Disposition: form-data; name="a"\r\n'
        b"X-Padding: " + b"p" * 500 + b"\r\n\r\n"
        b"x\r\n--" + B + b"--"
    )

    with pytest.raises(MalformedMultipart):
        _parse(body, chunk_size, max_header_bytes=256)


def test_empty_boundary_is_refused():
    with pytest.raises(ValueError):
        MultipartParser(b"")


class TestExtractBoundary:
    def test_plain_token(self):
        assert extract_boundary("multipart/form-data; boundary=abc123") == b"abc123"

    def test_quoted_and_case_insensitive_media_type(self):
        assert extract_boundary('Multipart/Form-Data; charset=utf-8; boundary="a b:c"') == b"a b:c"

    @pytest.mark.parametrize(
        "content_type",
        [
            None,
            "",
            "application/json",
            "multipart/mixed; boundary=abc",
            "multipart/form-data",
            "multipart/form-data; boundary=",
            "multipart/form-data; boundary=" + "x" * 71,
            "multipart/form-data; boundary=ünïcode",
        ],
    )
    def test_rejects_bad_content_types(self, content_type):
        with pytest.raises(MalformedMultipart):
            extract_boundary(content_type)
