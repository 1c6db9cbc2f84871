"""
=============================================================================
EXCHANGE: ONE REQUEST, ONE RESPONSE
=============================================================================

The response side of the server. Handlers never build a response object;
they write through an Exchange, which lets a 2 GB file go out in 8 KB
pieces instead of being loaded into memory first.

=============================================================================
PROTOCOL
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    TWO-STEP RESPONSE                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. exchange.response_headers.set("Content-Type", "text/plain")    │
    │                                                                      │
    │   2. exchange.send_response_headers(200, length)                    │
    │        length == NO_BODY_CONTENT (-1)  → no body follows            │
    │        length >= 0                     → exactly `length` bytes     │
    │                                                                      │
    │   3. exchange.response_body.write(chunk)   (repeat, GET only)       │
    │                                                                      │
    │   4. close request_body, response_body, exchange (in that order)   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Headers go out exactly once. Writing before they are sent, sending them
twice, or writing more than the announced length is a programming error
and raises immediately.

The transport adds Date, Server and "Connection: close": every exchange
owns its connection and closing the exchange closes the socket.

=============================================================================
"""

import io
import logging
from email.utils import formatdate
from typing import Optional, Protocol

from ..http.headers import Headers
from ..http.request import HTTPRequest
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)

NO_BODY_CONTENT = -1


class Sink(Protocol):
    """What an Exchange writes to (a Connection, or a test double)."""

    def sendall(self, data: bytes) -> None: ...

    def close(self) -> None: ...


class ResponseBody(io.RawIOBase):
    """
    Write-only stream for the response body.

    Bytes are passed straight to the connection. The stream knows how
    many bytes the status line announced and refuses to send more.
    """

    def __init__(self, exchange: "Exchange"):
        super().__init__()
        self._exchange = exchange
        self.bytes_written = 0

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        if self.closed:
            raise ValueError("write to closed response body")

        exchange = self._exchange
        if not exchange.headers_sent:
            raise IOError("response headers must be sent before the body")

        size = len(data)
        if self.bytes_written + size > exchange.expected_length:
            raise IOError(
                f"body exceeds announced length {exchange.expected_length} "
                f"({self.bytes_written + size} bytes)"
            )

        if size:
            exchange.sink.sendall(bytes(data))
            self.bytes_written += size
        return size

    def close(self) -> None:
        if self.closed:
            return
        exchange = self._exchange
        if exchange.headers_sent and self.bytes_written < exchange.expected_length:
            logger.warning(
                f"Response body closed after {self.bytes_written} of "
                f"{exchange.expected_length} bytes: {exchange.request.path}"
            )
        super().close()


class Exchange:
    """
    One HTTP request and the response being written for it.

    Attributes:
        request:          The parsed request.
        request_body:     Readable stream over the request body.
        response_headers: Headers to send; edit before send_response_headers.
        response_body:    Writable stream for the body.
        status:           Status sent, or None while headers are pending.
    """

    def __init__(self, request: HTTPRequest, sink: Sink, server_name: str = "fileserver/1.0"):
        self.request = request
        self.sink = sink
        self.server_name = server_name

        self.request_body = io.BytesIO(request.body)
        self.response_headers = Headers()
        self.response_body = ResponseBody(self)

        self.status: Optional[int] = None
        self.expected_length = 0
        self._closed = False

    # =========================================================================
    # REQUEST SIDE
    # =========================================================================

    @property
    def request_method(self) -> str:
        return self.request.method

    @property
    def request_path(self) -> str:
        return self.request.path

    @property
    def request_headers(self) -> Headers:
        return self.request.headers

    # =========================================================================
    # RESPONSE SIDE
    # =========================================================================

    @property
    def headers_sent(self) -> bool:
        return self.status is not None

    @property
    def bytes_sent(self) -> int:
        return self.response_body.bytes_written

    def send_response_headers(self, status: int, length: int) -> None:
        """
        Send the status line and headers.

        Args:
            status: HTTP status code.
            length: NO_BODY_CONTENT (-1) when no body follows, otherwise the
                    exact number of body bytes that will be written.
                    Ignored for HEAD requests, which never get a body; the
                    caller sets Content-Length itself in that case.

        Raises:
            IOError: Headers were already sent.
        """
        if self.headers_sent:
            raise IOError("response headers already sent")

        try:
            status = HTTPStatus(status)
            phrase = status.phrase
            allows_body = status.allows_body
        except ValueError:
            phrase, allows_body = "Unknown", True

        headers = self.response_headers
        is_head = self.request.method.upper() == "HEAD"

        if length < NO_BODY_CONTENT:
            raise ValueError(f"invalid response length: {length}")
        if length > 0 and (is_head or not allows_body):
            logger.warning(f"Ignoring body length {length} for {self.request.method} {status}")
            length = NO_BODY_CONTENT

        if length == NO_BODY_CONTENT:
            self.expected_length = 0
            if allows_body and not is_head:
                headers.setdefault("Content-Length", "0")
        else:
            self.expected_length = length
            headers.set("Content-Length", str(length))

        headers.setdefault("Date", formatdate(usegmt=True))
        headers.setdefault("Server", self.server_name)
        headers.set("Connection", "close")

        lines = [f"HTTP/1.1 {int(status)} {phrase}"]
        lines.extend(f"{name}: {value}" for name, value in headers.items())
        head = ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")

        self.status = int(status)
        self.sink.sendall(head)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Release the exchange and its connection.

        Safe to call more than once; only the first call does anything.
        """
        if self._closed:
            return
        self._closed = True
        self.request_body.close()
        self.response_body.close()
        self.sink.close()

    def __enter__(self) -> "Exchange":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"<Exchange {self.request.method} {self.request.path} status={self.status}>"
