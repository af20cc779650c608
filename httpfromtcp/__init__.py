"""A small HTTP/1.1 server built on raw TCP sockets: request parsing, response writing and serving."""

__version__ = "0.1.0"

__all__ = ["headers", "request", "response", "server"]