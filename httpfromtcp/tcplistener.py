"""A TCP listener that prints each request it receives."""

from __future__ import annotations

import argparse
import logging
import socket

from httpfromtcp.request import Request, request_from_reader

PORT = 42069

log = logging.getLogger(__name__)


def format_request(request: Request) -> str:
    """Render a request as the listener's human-readable report."""
    line = request.request_line
    lines = [
        "Request line:",
        f"- Method: {line.method}",
        f"- Target: {line.request_target}",
        f"- Version: {line.http_version}",
        "Headers:",
        *(f"- {key}: {value}" for key, value in request.headers.items()),
        "Body:",
        request.body.decode("utf-8", errors="replace"),
    ]
    return "\n".join(lines) + "\n"


def main(argv=None) -> int:
    """Accept connections forever, printing each parsed request."""
    parser = argparse.ArgumentParser(description="Print HTTP requests received over TCP.")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    try:
        listener = socket.create_server(("", args.port))
    except OSError as exc:
        log.error("Couldn't open tcp listener on port %d: %s", args.port, exc)
        return 1

    log.info("listening for tcp request on :%d", args.port)
    with listener:
        try:
            while True:
                try:
                    conn, _ = listener.accept()
                except OSError as exc:
                    log.error("Couldn't accept connection: %s", exc)
                    return 1
                with conn, conn.makefile("rb", buffering=0) as reader:
                    try:
                        request = request_from_reader(reader)
                    except (ValueError, OSError) as exc:
                        log.error("%s", exc)
                        continue
                print(format_request(request), end="", flush=True)
        except KeyboardInterrupt:
            return 0