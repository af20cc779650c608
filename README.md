# httpfromtcp

A small HTTP/1.1 server written straight on top of TCP sockets. It parses
requests incrementally from any readable byte stream, validates the request
line and header names, reads bodies sized by `Content-Length`, and builds
responses through a stateful writer that also supports chunked transfer
encoding with trailers.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Commands

### `httpfromtcp-server [--port PORT]`

Starts the demonstration server (default port 42069) on all interfaces and
runs until it receives SIGINT or SIGTERM. Routes:

- `/video` – the file `assets/vim.mp4`, read relative to the current working
  directory, sent as `video/mp4`. If the file cannot be read, a 500 response
  with the error text is sent.
- `/httpbin/<path>` – fetched over HTTPS from the public httpbin service and
  relayed as a chunked `200 OK` response, followed by `X-Content-Sha256` and
  `X-Content-Length` trailers computed over the relayed body.
- `/yourproblem` – a 400 HTML page.
- `/myproblem` – a 500 HTML page.
- anything else – a 200 HTML success page.

### `httpfromtcp-tcplistener [--port PORT]`

Listens on TCP (default port 42069), reads one request from each connection
and prints its request line, headers and body. Requests that fail to parse are
logged and skipped.

### `httpfromtcp-udpsender [--host HOST] [--port PORT]`

Shows a `>` prompt, reads lines from standard input and sends each one as a UDP
datagram (default `localhost:42069`) until end of input or Ctrl+C.

## Library use

### Parsing requests

```python
import io
from httpfromtcp.request import request_from_reader

req = request_from_reader(io.BytesIO(
    b"POST /submit HTTP/1.1\r\nHost: localhost:42069\r\n"
    b"Content-Length: 13\r\n\r\nhello world!\n"
))
print(req.request_line.method, req.request_line.request_target)  # POST /submit
print(req.request_line.http_version)                             # 1.1
print(req.headers["host"], req.body)
```

`request_from_reader` accepts any object with a `read(size)` method that
returns bytes and an empty result at end of stream. Header names are stored
lower-cased in a `Headers` mapping (a `dict` subclass); repeated headers are
joined with `", "`. Without a `Content-Length` header the body is left empty.

Errors are raised as exceptions, both subclasses of `ValueError`:

- `RequestError` (`httpfromtcp.request`) – wrong number of parts in the
  request line, a method that is not all upper-case letters, a protocol other
  than `HTTP/1.1`, a non-numeric `Content-Length`, or a body longer or shorter
  than `Content-Length`.
- `HeaderError` (`httpfromtcp.headers`) – a header line without `": "`, with a
  space in the name, or with a character in the name other than letters,
  digits and ``!~#$%&'*-.^_`|``.

The lower-level pieces are public too: `parse_request_line(data)`,
`request_line_from_string(text)` and `Headers.parse(data)`, which returns
`(bytes_consumed, done)` and `(0, False)` while more data is needed.
`Headers.override_header(key, value)` replaces an existing header and raises
`HeaderError` if it is absent.

### Building responses

```python
from httpfromtcp.response import StatusCode, Writer, get_default_headers

writer = Writer()
writer.write_status_line(StatusCode.OK)
writer.write_headers(get_default_headers(5))
writer.write_body(b"hello")
raw = writer.getvalue()
```

The writer enforces order: status line, then headers, then either
`write_body` or a sequence of `write_chunked_body` calls ended by
`write_chunked_body_done`, after which `write_trailers` may be used. Writing
out of order, or a status code other than 200, 400 or 500, raises
`WriterError`. `get_default_headers(n)` gives `Content-Length`,
`Connection: close` and `Content-Type: text/plain`.

### Running a server

```python
from httpfromtcp.server import HandlerError, serve
from httpfromtcp.response import StatusCode

def handler(writer, request):
    if request.request_line.request_target == "/nope":
        return HandlerError(StatusCode.BAD_REQUEST, body=b"nope")
    writer.write_status_line(StatusCode.OK)
    writer.write_headers({"Content-Type": "text/plain"})
    writer.write_body(b"hi")

with serve(8080, handler) as server:
    ...  # server.port holds the bound port
```

`serve(port, handler)` listens on all interfaces and handles each connection
in its own thread. A handler fills the `Writer`, or returns or raises a
`HandlerError`, whose status, headers and body are then sent instead. If the
request cannot be parsed, a 400 `text/plain` response carrying the error
message is sent. `Server.close()` (or leaving the `with` block) stops
accepting connections.

## Limitations

- One request per connection; the connection is closed after the response.
- The whole response is built in memory and sent at once, so chunked
  responses are not streamed to the client as they are produced.
- Only `HTTP/1.1` request lines are accepted, and request bodies are read only
  by `Content-Length` (no chunked request bodies).
- The writer knows only the status codes 200, 400 and 500.
- No TLS on the serving side.