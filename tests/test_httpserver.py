import hashlib
import io
import socket
import urllib.error
from unittest import mock

from httpfromtcp.httpserver import (
    BAD_REQUEST_BODY,
    INTERNAL_SERVER_ERROR_BODY,
    OK_BODY,
    handler,
    main,
)
from httpfromtcp.request import Request, RequestLine
from httpfromtcp.response import StatusCode, Writer


def _request(target: str) -> Request:
    return Request(
        request_line=RequestLine(http_version="1.1", request_target=target, method="GET")
    )


def test_default_route_writes_ok_page():
    writer = Writer()
    assert handler(writer, _request("/")) is None
    out = writer.getvalue()
    assert out.startswith(b"HTTP/1.1 200 OK \r\n")
    assert b"Content-Type: text/html\r\n" in out
    assert b"Connection: close\r\n" in out
    assert f"Content-Length: {len(OK_BODY)}\r\n".encode() in out
    assert out.endswith(b"\r\n\r\n" + OK_BODY)


def test_yourproblem_returns_bad_request_error():
    writer = Writer()
    error = handler(writer, _request("/yourproblem"))
    assert error.status_code == StatusCode.BAD_REQUEST
    assert error.headers == {"Content-Type": "text/html"}
    assert error.body == BAD_REQUEST_BODY
    assert writer.getvalue() == b""


def test_myproblem_returns_internal_error():
    error = handler(Writer(), _request("/myproblem"))
    assert error.status_code == StatusCode.INTERNAL_SERVER_ERROR
    assert error.headers == {"Content-Type": "text/html"}
    assert error.body == INTERNAL_SERVER_ERROR_BODY


def test_video_route_serves_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "vim.mp4").write_bytes(b"not really a video")
    writer = Writer()
    assert handler(writer, _request("/video")) is None
    out = writer.getvalue()
    assert out.startswith(b"HTTP/1.1 200 OK \r\n")
    assert b"Content-Type: video/mp4\r\n" in out
    assert out.endswith(b"not really a video")


def test_video_route_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    error = handler(Writer(), _request("/video"))
    assert error.status_code == StatusCode.INTERNAL_SERVER_ERROR
    assert error.headers == {"Content-Type": "text/plain"}
    assert b"vim.mp4" in error.body


def test_proxy_streams_chunks_with_trailers():
    payload = b"hello"
    writer = Writer()
    with mock.patch("urllib.request.urlopen", return_value=io.BytesIO(payload)) as opened:
        assert handler(writer, _request("/httpbin/get")) is None
    opened.assert_called_once_with("https://httpbin.org/get")
    out = writer.getvalue()
    assert out.startswith(b"HTTP/1.1 200 OK \r\n")
    assert b"Transfer-Encoding: chunked\r\n" in out
    assert b"Trailer: X-Content-Sha256, X-Content-Length\r\n" in out
    assert b"5\r\nhello\r\n0\r\n" in out
    sha = hashlib.sha256(payload).hexdigest()
    assert f"X-Content-Sha256: {sha}\r\n".encode() in out
    assert f"X-Content-Length: {len(payload)}\r\n".encode() in out
    assert out.endswith(b"\r\n\r\n")


def test_proxy_upstream_failure_returns_error():
    writer = Writer()
    with mock.patch(
        "urllib.request.urlopen", side_effect=urllib.error.URLError("unreachable")
    ):
        error = handler(writer, _request("/httpbin/get"))
    assert error.status_code == StatusCode.INTERNAL_SERVER_ERROR
    assert error.headers == {"Content-Type": "text/plain"}
    assert b"unreachable" in error.body
    assert writer.getvalue() == b""


def test_main_fails_on_busy_port():
    with socket.create_server(("", 0)) as blocker:
        port = blocker.getsockname()[1]
        assert main(["--port", str(port)]) == 1