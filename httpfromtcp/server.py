"""A threaded TCP server that answers each connection with one response."""

from __future__ import annotations

import socket
import sys
import threading
from typing import Callable, Optional

from httpfromtcp.headers import Headers
from httpfromtcp.request import Request, request_from_reader
from httpfromtcp.response import StatusCode, Writer, WriterError

_ACCEPT_POLL_SECONDS = 0.2


class HandlerError(Exception):
    """An error response a handler wants sent in place of a normal one.

    A handler may either return an instance or raise it.
    """

    def __init__(self, status_code, headers=None, body=b"") -> None:
        self.status_code = status_code
        self.headers = headers if headers is not None else Headers()
        self.body = bytes(body)
        super().__init__(
            f"{int(status_code)}: {self.body.decode('utf-8', errors='replace')}"
        )

    def write_error(self, writer: Writer) -> None:
        """Write this error as a complete response into ``writer``."""
        try:
            writer.write_status_line(self.status_code)
        except WriterError as exc:
            raise WriterError("couldn't write status line for handler error") from exc
        try:
            writer.write_headers(self.headers)
        except WriterError as exc:
            raise WriterError("couldn't write headers for handler error") from exc
        try:
            writer.write_body(self.body)
        except WriterError as exc:
            raise WriterError("couldn't write body for handler error") from exc


Handler = Callable[[Writer, Request], Optional[HandlerError]]


def _send(conn: socket.socket, data: bytes) -> None:
    try:
        conn.sendall(data)
    except OSError:
        pass


class Server:
    """Accepts connections in a background thread and serves each one."""

    def __init__(self, listener: socket.socket, handler: Handler) -> None:
        self._listener = listener
        self._handler = handler
        self._closed = threading.Event()
        self.port = listener.getsockname()[1]
        listener.settimeout(_ACCEPT_POLL_SECONDS)
        self._thread = threading.Thread(target=self._listen, daemon=True)
        self._thread.start()

    def close(self) -> None:
        """Stop accepting connections and release the listening socket."""
        self._closed.set()
        try:
            self._listener.close()
        except OSError as exc:
            raise OSError(f"couldn't close listener: {exc}") from exc
        if self._thread is not threading.current_thread():
            self._thread.join()

    def __enter__(self) -> "Server":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _listen(self) -> None:
        while not self._closed.is_set():
            try:
                conn, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                if self._closed.is_set():
                    return
                print("couldn't accept connection", file=sys.stderr)
                continue
            conn.settimeout(None)
            threading.Thread(target=self._handle, args=(conn,), daemon=True).start()

    def _handle(self, conn: socket.socket) -> None:
        with conn:
            writer = Writer()
            try:
                with conn.makefile("rb", buffering=0) as reader:
                    request = request_from_reader(reader)
            except (ValueError, OSError) as exc:
                error = HandlerError(
                    StatusCode.BAD_REQUEST,
                    Headers({"Content-Type": "text/plain"}),
                    str(exc).encode(),
                )
            else:
                try:
                    error = self._handler(writer, request)
                except HandlerError as exc:
                    error = exc

            if error is not None:
                try:
                    error.write_error(writer)
                except WriterError as exc:
                    _send(conn, str(exc).encode())
                    return
            _send(conn, writer.getvalue())


def serve(port: int, handler: Handler) -> Server:
    """Listen on ``port`` on all interfaces and serve requests with ``handler``."""
    try:
        listener = socket.create_server(("", port))
    except OSError as exc:
        raise OSError(f"couldn't open listener on port {port}: {exc}") from exc
    return Server(listener, handler)