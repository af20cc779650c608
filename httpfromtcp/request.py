"""Incremental parsing of HTTP/1.1 requests from a byte stream."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field

from httpfromtcp.headers import Headers

CRLF = b"\r\n"
SUPPORTED_PROTOCOL = "HTTP/1.1"

_READ_SIZE = 1024
_INTEGER = re.compile(r"[+-]?[0-9]+")


class RequestError(ValueError):
    """Raised when a request cannot be parsed."""


class _State(enum.Enum):
    INITIALIZED = enum.auto()
    PARSING_HEADERS = enum.auto()
    PARSING_BODY = enum.auto()
    DONE = enum.auto()


@dataclass
class RequestLine:
    """The first line of a request."""

    http_version: str = ""
    request_target: str = ""
    method: str = ""


def _to_int(value: str, message: str) -> int:
    if not _INTEGER.fullmatch(value):
        raise RequestError(message)
    return int(value)


@dataclass
class Request:
    """A parsed request: request line, headers and body."""

    request_line: RequestLine = field(default_factory=RequestLine)
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    _state: _State = field(default=_State.INITIALIZED, repr=False, compare=False)

    def _parse(self, data: bytes) -> int:
        total = 0
        while self._state is not _State.DONE:
            consumed = self._parse_single(data[total:])
            if consumed == 0:
                return total
            total += consumed
        return total

    def _parse_single(self, data: bytes) -> int:
        if self._state is _State.INITIALIZED:
            request_line, consumed = parse_request_line(data)
            if request_line is None:
                return 0
            self.request_line = request_line
            self._state = _State.PARSING_HEADERS
            return consumed

        if self._state is _State.PARSING_HEADERS:
            consumed, done = self.headers.parse(data)
            if done:
                self._state = _State.PARSING_BODY
            return consumed

        if self._state is _State.PARSING_BODY:
            value = self.headers.get("content-length")
            if value is None:
                self._state = _State.DONE
                return 0
            self.body += bytes(data)
            content_length = _to_int(value, "couldnt convert content length to int")
            if len(self.body) > content_length:
                raise RequestError("to much content provided")
            if len(self.body) == content_length:
                self._state = _State.DONE
            return len(data)

        raise RequestError("error: trying to read data in a done state")


def parse_request_line(data: bytes) -> tuple[RequestLine | None, int]:
    """Parse the request line at the start of ``data``.

    Returns ``(None, 0)`` while the line is incomplete, otherwise the
    request line and the number of bytes it took including the CRLF.
    """
    idx = bytes(data).find(CRLF)
    if idx == -1:
        return None, 0
    text = bytes(data[:idx]).decode("utf-8", errors="replace")
    return request_line_from_string(text), idx + len(CRLF)


def request_line_from_string(text: str) -> RequestLine:
    """Build a request line from ``METHOD TARGET HTTP/1.1``."""
    parts = text.split(" ")
    if len(parts) != 3:
        raise RequestError("invalid method request line")

    method, target, protocol = parts
    if not all(ch.isalpha() and ch.isupper() for ch in method):
        raise RequestError("invalid http method")
    if protocol != SUPPORTED_PROTOCOL:
        raise RequestError("invalid protocol version")

    return RequestLine(
        http_version=protocol.split("/")[1],
        request_target=target,
        method=method,
    )


def request_from_reader(reader) -> Request:
    """Read and parse one request from ``reader``.

    ``reader`` needs a ``read(size)`` method that returns up to ``size``
    bytes and an empty result at end of stream.
    """
    request = Request()
    pending = bytearray()

    while request._state is not _State.DONE:
        chunk = reader.read(_READ_SIZE)
        if not chunk:
            request._state = _State.DONE
            break
        pending += chunk
        consumed = request._parse(bytes(pending))
        del pending[:consumed]

    value = request.headers.get("content-length")
    if value is not None:
        content_length = _to_int(value, "couldnt convert content-length to int")
        if len(request.body) < content_length:
            raise RequestError("not enough content provided")

    return request