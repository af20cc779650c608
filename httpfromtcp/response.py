"""Building HTTP/1.1 responses into an in-memory buffer."""

from __future__ import annotations

import enum

from httpfromtcp.headers import Headers

CRLF = "\r\n"
PROTOCOL = "HTTP/1.1"


class StatusCode(enum.IntEnum):
    """Status codes the writer knows how to emit."""

    OK = 200
    BAD_REQUEST = 400
    INTERNAL_SERVER_ERROR = 500

    @property
    def reason(self) -> str:
        return _REASONS[self]


_REASONS = {
    StatusCode.OK: "OK",
    StatusCode.BAD_REQUEST: "Bad Request",
    StatusCode.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


class WriterError(RuntimeError):
    """Raised when a response part is written out of order or is invalid."""


class _WriterState(enum.IntEnum):
    INITIALIZED = 0
    WRITING_HEADERS = 1
    WRITING_BODY = 2
    WRITING_TRAILERS = 3


class Writer:
    """Accumulates a response: status line, headers, body and trailers."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._state = _WriterState.INITIALIZED

    def _write_fields(self, fields) -> None:
        for key, value in fields.items():
            self._buffer += f"{key}: {value}{CRLF}".encode()
        self._buffer += CRLF.encode()

    def write_status_line(self, status_code) -> None:
        try:
            code = StatusCode(status_code)
        except ValueError:
            raise WriterError("unknown status code") from None
        self._buffer += f"{PROTOCOL} {int(code)} {code.reason} {CRLF}".encode()
        self._state = _WriterState.WRITING_HEADERS

    def write_headers(self, headers) -> None:
        if self._state is not _WriterState.WRITING_HEADERS:
            raise WriterError("invalid writer status, write status line first")
        self._write_fields(headers)
        self._state = _WriterState.WRITING_BODY

    def write_body(self, data: bytes) -> int:
        if self._state is not _WriterState.WRITING_BODY:
            raise WriterError("invalid writer status, write headers first")
        self._buffer += data
        return len(data)

    def write_chunked_body(self, data: bytes) -> int:
        """Write ``data`` as one chunk; returns the bytes written."""
        if self._state is not _WriterState.WRITING_BODY:
            raise WriterError(f"cannot write body in state {int(self._state)}")
        chunk = f"{len(data):x}{CRLF}".encode() + bytes(data) + CRLF.encode()
        self._buffer += chunk
        return len(chunk)

    def write_chunked_body_done(self) -> int:
        """Write the terminating zero-length chunk marker."""
        if self._state is not _WriterState.WRITING_BODY:
            raise WriterError(f"cannot write body in state {int(self._state)}")
        marker = f"0{CRLF}".encode()
        self._buffer += marker
        self._state = _WriterState.WRITING_TRAILERS
        return len(marker)

    def write_trailers(self, headers) -> None:
        if self._state is not _WriterState.WRITING_TRAILERS:
            raise WriterError(f"cannot write trailers in state {int(self._state)}")
        self._write_fields(headers)

    def getvalue(self) -> bytes:
        """Return everything written so far."""
        return bytes(self._buffer)


def get_default_headers(content_len: int) -> Headers:
    """Headers for a plain-text response of ``content_len`` bytes."""
    return Headers(
        {
            "Content-Length": str(content_len),
            "Connection": "close",
            "Content-Type": "text/plain",
        }
    )