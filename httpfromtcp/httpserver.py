"""The demonstration HTTP server and its request handler."""

from __future__ import annotations

import argparse
import hashlib
import logging
import signal
import threading
import urllib.error
import urllib.request
from pathlib import Path

from httpfromtcp.headers import Headers
from httpfromtcp.request import Request
from httpfromtcp.response import StatusCode, Writer, WriterError, get_default_headers
from httpfromtcp.server import HandlerError, serve

PORT = 42069
VIDEO_PATH = Path("assets") / "vim.mp4"
UPSTREAM_URL = "https://httpbin.org/"
PROXY_PREFIX = "/httpbin/"

BAD_REQUEST_BODY = (
    b"<html><head><title>400 Bad Request</title></head><body><h1>Bad Request</h1>"
    b"<p>Your request honestly kinda sucked.</p></body></html>"
)
INTERNAL_SERVER_ERROR_BODY = (
    b"<html><head><title>500 Internal Server Error</title></head><body>"
    b"<h1>Internal Server Error</h1><p>Okay, you know what? This one is on me.</p>"
    b"</body></html>"
)
OK_BODY = (
    b"<html><head><title>200 OK</title></head><body><h1>Success!</h1>"
    b"<p>Your request was an absolute banger.</p></body></html>"
)

_PROXY_READ_SIZE = 1024

log = logging.getLogger(__name__)


def _unknown_error(exc: BaseException) -> HandlerError:
    return HandlerError(
        StatusCode.INTERNAL_SERVER_ERROR,
        Headers({"Content-Type": "text/plain"}),
        str(exc).encode(),
    )


def _html_error(status_code: StatusCode, body: bytes) -> HandlerError:
    return HandlerError(status_code, Headers({"Content-Type": "text/html"}), body)


def _serve_ok(writer: Writer) -> HandlerError | None:
    try:
        writer.write_status_line(StatusCode.OK)
        headers = get_default_headers(len(OK_BODY))
        headers.override_header("Content-Type", "text/html")
        writer.write_headers(headers)
        writer.write_body(OK_BODY)
    except WriterError as exc:
        return _unknown_error(exc)
    return None


def _serve_video(writer: Writer) -> HandlerError | None:
    try:
        video = VIDEO_PATH.read_bytes()
    except OSError as exc:
        return _unknown_error(exc)
    try:
        writer.write_status_line(StatusCode.OK)
        writer.write_headers(Headers({"Content-Type": "video/mp4"}))
        writer.write_body(video)
    except WriterError as exc:
        return _unknown_error(exc)
    return None


def _proxy(writer: Writer, target: str) -> HandlerError | None:
    try:
        upstream = urllib.request.urlopen(UPSTREAM_URL + target)
    except urllib.error.HTTPError as exc:
        upstream = exc
    except (OSError, ValueError) as exc:
        return _unknown_error(exc)

    with upstream:
        try:
            writer.write_status_line(StatusCode.OK)
            writer.write_headers(
                Headers(
                    {
                        "Transfer-Encoding": "chunked",
                        "Connection": "close",
                        "Trailer": "X-Content-Sha256, X-Content-Length",
                    }
                )
            )
        except WriterError as exc:
            return _unknown_error(exc)

        full_body = bytearray()
        while True:
            try:
                chunk = upstream.read(_PROXY_READ_SIZE)
            except OSError as exc:
                print("Error reading response body:", exc)
                break
            if not chunk:
                break
            try:
                writer.write_chunked_body(chunk)
            except WriterError as exc:
                print("Error writing chunked body:", exc)
                break
            full_body += chunk

    try:
        writer.write_chunked_body_done()
        writer.write_trailers(
            Headers(
                {
                    "X-Content-Sha256": hashlib.sha256(full_body).hexdigest(),
                    "X-Content-Length": str(len(full_body)),
                }
            )
        )
    except WriterError as exc:
        return _unknown_error(exc)
    return None


def handler(writer: Writer, request: Request) -> HandlerError | None:
    """Route a request to the video, proxy, error or success response."""
    target = request.request_line.request_target
    if target == "/video":
        return _serve_video(writer)
    if target.startswith(PROXY_PREFIX):
        return _proxy(writer, target[len(PROXY_PREFIX):])
    if target == "/yourproblem":
        return _html_error(StatusCode.BAD_REQUEST, BAD_REQUEST_BODY)
    if target == "/myproblem":
        return _html_error(StatusCode.INTERNAL_SERVER_ERROR, INTERNAL_SERVER_ERROR_BODY)
    return _serve_ok(writer)


def main(argv=None) -> int:
    """Run the server until SIGINT or SIGTERM arrives."""
    parser = argparse.ArgumentParser(description="Serve HTTP over a raw TCP listener.")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    try:
        server = serve(args.port, handler)
    except OSError as exc:
        log.error("Error starting server: %s", exc)
        return 1

    stop = threading.Event()

    def _request_stop(signum, frame) -> None:
        stop.set()

    previous = {
        sig: signal.signal(sig, _request_stop) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        with server:
            log.info("Server started on port %d", args.port)
            while not stop.wait(0.5):
                pass
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)
    log.info("Server gracefully stopped")
    return 0