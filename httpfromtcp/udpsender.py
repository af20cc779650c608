"""Send lines typed at a prompt as UDP datagrams."""

from __future__ import annotations

import argparse
import socket
import sys
from typing import Iterable, Iterator, TextIO

HOST = "localhost"
PORT = 42069


def send_lines(lines: Iterable, host: str = HOST, port: int = PORT) -> int:
    """Send each line as one datagram; return how many were sent."""
    family, kind, proto, _, address = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
    sent = 0
    with socket.socket(family, kind, proto) as sock:
        sock.connect(address)
        for line in lines:
            data = line.encode() if isinstance(line, str) else bytes(line)
            try:
                sock.send(data)
            except OSError as exc:
                print(f"Couldn't write line: {exc}", file=sys.stderr)
                continue
            sent += 1
    return sent


def _prompted_lines(stream: TextIO, out: TextIO) -> Iterator[str]:
    while True:
        out.write(">")
        out.flush()
        line = stream.readline()
        if line:
            yield line
        if not line.endswith("\n"):
            return


def main(argv=None) -> int:
    """Read lines from standard input and send each one over UDP."""
    parser = argparse.ArgumentParser(description="Send lines from stdin as UDP datagrams.")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)

    try:
        send_lines(_prompted_lines(sys.stdin, sys.stdout), args.host, args.port)
    except OSError as exc:
        print(f"Couldn't dial a UDP connection: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    return 0