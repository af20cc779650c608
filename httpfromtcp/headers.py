"""HTTP header field parsing and storage."""

from __future__ import annotations

CRLF = b"\r\n"

_SPECIAL_CHARACTERS = frozenset("!~#$%&'*-.^_`|")


class HeaderError(ValueError):
    """Raised when a header line is malformed or a header is missing."""


def _is_valid_key_char(ch: str) -> bool:
    return ch.isalpha() or ch.isdecimal() or ch in _SPECIAL_CHARACTERS


class Headers(dict):
    """A mapping of header names to values.

    Names read from the wire are stored lower-cased; repeated names are
    joined into one comma-separated value.
    """

    def parse(self, data: bytes) -> tuple[int, bool]:
        """Parse one header line from the start of ``data``.

        Returns ``(bytes_consumed, done)``. ``(0, False)`` means more data
        is needed; ``done`` is true once the blank line ending the header
        block has been consumed.
        """
        idx = bytes(data).find(CRLF)
        if idx == -1:
            return 0, False
        if idx == 0:
            return len(CRLF), True

        text = bytes(data[:idx]).decode("utf-8", errors="replace")
        parts = text.strip().split(": ")
        if len(parts) != 2 or " " in parts[0]:
            raise HeaderError("invalid header format")

        name, value = parts
        if not all(_is_valid_key_char(ch) for ch in name):
            raise HeaderError("invalid header key format")

        key = name.strip().lower()
        value = value.strip()
        self[key] = f"{self[key]}, {value}" if key in self else value
        return idx + len(CRLF), False

    def override_header(self, key: str, value: str) -> None:
        """Replace the value of an existing header."""
        if key not in self:
            raise HeaderError("header not found")
        self[key] = value