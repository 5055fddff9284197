from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from upload_intake.backend.app.application.uploads.headers import parse_options_header
from upload_intake.backend.app.domain.uploads.errors import MalformedMultipart

CRLF = b"\r\n"
# RFC 2046: boundary is 1..70 characters
MAX_BOUNDARY_LENGTH = 70
# the line holding the boundary may carry transport padding before CRLF
MAX_BOUNDARY_LINE_PADDING = 1024


class ParserState(StrEnum):
    AWAITING_BOUNDARY = "AWAITING_BOUNDARY"
    AFTER_BOUNDARY = "AFTER_BOUNDARY"
    PARSING_PART_HEADER = "PARSING_PART_HEADER"
    STREAMING_BODY = "STREAMING_BODY"
    DONE = "DONE"


@dataclass(frozen=True, slots=True)
class PartStarted:
    headers: dict[str, str]


@dataclass(frozen=True, slots=True)
class PartData:
    data: bytes


@dataclass(frozen=True, slots=True)
class PartEnded:
    pass


ParserEvent = PartStarted | PartData | PartEnded


def extract_boundary(content_type: str | None) -> bytes:
    """Pull the boundary token out of a ``multipart/form-data`` Content-Type."""
    if not content_type:
        raise MalformedMultipart("Missing Content-Type header")

    media_type, params = parse_options_header(content_type)
    if media_type != "multipart/form-data":
        raise MalformedMultipart(f"Expected multipart/form-data, got '{media_type or 'nothing'}'")

    boundary = params.get("boundary", "")
    if not boundary:
        raise MalformedMultipart("Missing multipart boundary")
    if len(boundary) > MAX_BOUNDARY_LENGTH:
        raise MalformedMultipart("Multipart boundary is too long")
    try:
        return boundary.encode("ascii")
    except UnicodeEncodeError as e:
        raise MalformedMultipart("Multipart boundary must be ASCII") from e


class MultipartParser:
    """
    Incremental multipart/form-data parser.

    Bytes are pushed in with feed() in chunks of any size and come back as a
    flat list of events: PartStarted, then zero or more PartData, then
    PartEnded, for every part in order. Only the bytes that could still be the
    start of the next delimiter are buffered while a part body streams.
    finish() must be called once the body is exhausted.
    """

    def __init__(self, boundary: bytes, *, max_header_bytes: int = 16 * 1024) -> None:
        if not boundary:
            raise ValueError("boundary must not be empty")
        self._dash_boundary = b"--" + boundary
        self._delimiter = CRLF + self._dash_boundary
        self._max_header_bytes = max_header_bytes
        self._buffer = bytearray()
        self._state = ParserState.AWAITING_BOUNDARY
        self._in_preamble = False

    @property
    def state(self) -> ParserState:
        return self._state

    def feed(self, chunk: bytes) -> list[ParserEvent]:
        events: list[ParserEvent] = []
        if self._state is ParserState.DONE:
            # epilogue
            return events
        self._buffer += chunk

        while True:
            if self._state is ParserState.AWAITING_BOUNDARY:
                progressed = self._skip_preamble()
            elif self._state is ParserState.AFTER_BOUNDARY:
                progressed = self._read_boundary_tail()
            elif self._state is ParserState.PARSING_PART_HEADER:
                progressed = self._read_headers(events)
            elif self._state is ParserState.STREAMING_BODY:
                progressed = self._read_body(events)
            else:
                self._buffer.clear()
                return events
            if not progressed:
                return events

    def finish(self) -> None:
        if self._state is ParserState.DONE:
            return
        if self._state is ParserState.AWAITING_BOUNDARY:
            raise MalformedMultipart("Multipart boundary not found in request body")
        raise MalformedMultipart("Unexpected end of multipart body")

    # ---------- states ----------

    def _skip_preamble(self) -> bool:
        idx = self._buffer.find(self._dash_boundary)
        if idx < 0:
            # keep a tail that could be the start of the boundary plus its CRLF
            keep = len(self._dash_boundary) + 1
            if len(self._buffer) > keep:
                del self._buffer[: len(self._buffer) - keep]
                self._in_preamble = True
            return False
        if idx:
            at_line_start = self._buffer[:idx].endswith(CRLF)
        else:
            at_line_start = not self._in_preamble
        if not at_line_start:
            # the boundary must start a line; keep looking past this match
            del self._buffer[: idx + 1]
            self._in_preamble = True
            return True
        del self._buffer[: idx + len(self._dash_boundary)]
        self._state = ParserState.AFTER_BOUNDARY
        return True

    def _read_boundary_tail(self) -> bool:
        if len(self._buffer) < 2:
            return False
        if self._buffer[:2] == b"--":
            self._state = ParserState.DONE
            self._buffer.clear()
            return False

        idx = self._buffer.find(CRLF)
        if idx < 0:
            if len(self._buffer) > MAX_BOUNDARY_LINE_PADDING:
                raise MalformedMultipart("Boundary line is not terminated")
            return False
        padding = bytes(self._buffer[:idx])
        if padding.strip(b" \t"):
            raise MalformedMultipart("Unexpected data after multipart boundary")
        del self._buffer[: idx + len(CRLF)]
        self._state = ParserState.PARSING_PART_HEADER
        return True

    def _read_headers(self, events: list[ParserEvent]) -> bool:
        if self._buffer[:2] == CRLF:
            # part without any header lines
            block = b""
            consumed = len(CRLF)
        else:
            idx = self._buffer.find(CRLF + CRLF)
            if idx < 0:
                if len(self._buffer) > self._max_header_bytes:
                    raise MalformedMultipart("Part header block is too large")
                return False
            if idx > self._max_header_bytes:
                raise MalformedMultipart("Part header block is too large")
            block = bytes(self._buffer[:idx])
            consumed = idx + 2 * len(CRLF)

        del self._buffer[:consumed]
        events.append(PartStarted(headers=_parse_header_block(block)))
        self._state = ParserState.STREAMING_BODY
        return True

    def _read_body(self, events: list[ParserEvent]) -> bool:
        idx = self._buffer.find(self._delimiter)
        if idx >= 0:
            if idx:
                events.append(PartData(bytes(self._buffer[:idx])))
            events.append(PartEnded())
            del self._buffer[: idx + len(self._delimiter)]
            self._state = ParserState.AFTER_BOUNDARY
            return True

        # a partial delimiter at the end of the buffer can only begin at a CR
        tail_start = max(len(self._buffer) - (len(self._delimiter) - 1), 0)
        cr = self._buffer.find(b"\r", tail_start)
        safe = cr if cr >= 0 else len(self._buffer)
        if safe > 0:
            events.append(PartData(bytes(self._buffer[:safe])))
            del self._buffer[:safe]
        return False


def _parse_header_block(block: bytes) -> dict[str, str]:
    headers: dict[str, str] = {}
    if not block:
        return headers
    try:
        text = block.decode("utf-8")
    except UnicodeDecodeError:
        # browsers send raw latin-1 filenames now and then
        text = block.decode("latin-1")

    last_name: str | None = None
    for line in text.split("\r\n"):
        if line[:1] in (" ", "\t"):
            # obsolete line folding
            if last_name is None:
                raise MalformedMultipart("Malformed part header")
            headers[last_name] = f"{headers[last_name]} {line.strip()}"
            continue
        name, sep, value = line.partition(":")
        name = name.strip().lower()
        if not sep or not name:
            raise MalformedMultipart("Malformed part header")
        headers[name] = value.strip()
        last_name = name
    return headers
