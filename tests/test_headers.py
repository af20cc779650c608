import pytest

from httpfromtcp.headers import HeaderError, Headers


def test_parse_single_valid_header():
    headers = Headers()
    line = b"Host: localhost:42069"
    consumed, done = headers.parse(line + b"\r\n\r\n")
    assert consumed == len(line) + 2
    assert done is False
    assert headers["host"] == "localhost:42069"


def test_parse_blank_line_finishes():
    headers = Headers()
    assert headers.parse(b"\r\n") == (2, True)
    assert len(headers) == 0


def test_parse_incomplete_line_needs_more_data():
    headers = Headers()
    assert headers.parse(b"Host: localho") == (0, False)
    assert len(headers) == 0


def test_parse_strips_surrounding_whitespace():
    headers = Headers()
    line = b"   Host: localhost:42069   "
    consumed, done = headers.parse(line + b"\r\n")
    assert consumed == len(line) + 2
    assert not done
    assert headers["host"] == "localhost:42069"


def test_parse_space_before_colon_is_invalid():
    headers = Headers()
    with pytest.raises(HeaderError, match="^invalid header format$"):
        headers.parse(b"       Host : localhost:42069       \r\n\r\n")


def test_parse_missing_separator_is_invalid():
    headers = Headers()
    with pytest.raises(HeaderError, match="^invalid header format$"):
        headers.parse(b"Host localhost:42069\r\n")


def test_parse_invalid_key_character():
    headers = Headers()
    with pytest.raises(HeaderError, match="^invalid header key format$"):
        headers.parse("H©st: localhost:42069\r\n".encode())


def test_parse_allows_special_characters_in_key():
    headers = Headers()
    headers.parse(b"X-Custom_Key~!: yes\r\n")
    assert headers["x-custom_key~!"] == "yes"


def test_parse_multiple_lines_in_sequence():
    headers = Headers()
    data = b"Host: localhost:42069\r\nAccept: */*\r\n\r\n"
    offset = 0
    done = False
    while not done:
        consumed, done = headers.parse(data[offset:])
        offset += consumed
    assert offset == len(data)
    assert headers == {"host": "localhost:42069", "accept": "*/*"}


def test_parse_duplicate_headers_are_joined():
    headers = Headers()
    headers.parse(b"Set-Person: lane-loves-go\r\n")
    headers.parse(b"Set-Person: prime-loves-zig\r\n")
    assert headers["set-person"] == "lane-loves-go, prime-loves-zig"


def test_override_existing_header():
    headers = Headers({"Content-Type": "text/plain"})
    headers.override_header("Content-Type", "text/html")
    assert headers["Content-Type"] == "text/html"


def test_override_missing_header_raises():
    headers = Headers()
    with pytest.raises(HeaderError, match="^header not found$"):
        headers.override_header("Content-Type", "text/html")
    assert "Content-Type" not in headers