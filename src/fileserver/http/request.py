"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses raw HTTP/1.x request bytes into HTTPRequest objects.

=============================================================================
WHAT THE FILE SERVER NEEDS FROM A REQUEST
=============================================================================

    GET /docs/a%20b.txt?x=1 HTTP/1.1\r\n
    ─┬─ ──────────┬──────── ────┬───
     │            │             └── version  (HTTP/1.0 or HTTP/1.1)
     │            └── URI  → path "/docs/a b.txt" (percent-decoded,
     │                       query string dropped)
     └── method (any token; GET/HEAD validation happens in the handler)

    If-None-Match: 9E107D9D372BB6826BD81D3542A419D6\r\n
    Host: localhost:8080\r\n
    \r\n

The parser is deliberately lenient about methods: "PATCH" or "FOO" parse
fine and are turned into 400 Bad Request by the file handler, which is
where the list of supported methods lives.

=============================================================================
PARSE ERRORS
=============================================================================

    400 Bad Request                 - Malformed request line, no terminator
    413 Payload Too Large           - Request exceeds max_request_size
    505 HTTP Version Not Supported  - Anything but HTTP/1.0 and HTTP/1.1

=============================================================================
"""

import re
from dataclasses import dataclass, field
from urllib.parse import unquote, urlparse

from .headers import Headers


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the status code the server answers with before closing the
    connection.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         Method exactly as sent ("GET", "head", "PATCH"...)
        uri:            Raw request target ("/a%20b.txt?x=1")
        path:           Decoded path component ("/a b.txt")
        version:        "HTTP/1.0" or "HTTP/1.1"
        headers:        Case-insensitive multi-map of header values
        body:           Raw body bytes (by Content-Length)
        client_address: (ip, port) of the peer, for logging
    """

    method: str
    uri: str
    path: str = "/"
    version: str = "HTTP/1.1"
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    client_address: tuple[str, int] = ("", 0)

    @property
    def client_ip(self) -> str:
        return self.client_address[0]

    def get_header(self, name: str, default: str = "") -> str:
        """First value of a header (case-insensitive), or ``default``."""
        return self.headers.get(name, default)


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    REQUEST_LINE_PATTERN: ^(token) (target) (HTTP/d.d)$
        token   - RFC 7230 tchar run; case is preserved
        target  - anything without a space
    HEADER_PATTERN: ^(name):\\s*(value)$
    """

    REQUEST_LINE_PATTERN = re.compile(r"^([!#$%&'*+.^_`|~0-9A-Za-z-]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")
    SUPPORTED_VERSIONS = ("HTTP/1.0", "HTTP/1.1")

    def __init__(self, max_request_size: int = 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(self, data: bytes, client_address: tuple[str, int] = ("", 0)) -> HTTPRequest:
        """
        Parse one complete request (headers plus Content-Length body).

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(f"Request too large: {len(data)} bytes", status_code=413)

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        # latin-1 maps every byte, so decoding cannot fail
        header_section = data[:header_end].decode("latin-1")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, uri, path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", "0"))
        except ValueError:
            raise HTTPParseError("Invalid Content-Length header")
        if content_length < 0 or len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            uri=uri,
            path=path,
            version=version,
            headers=headers,
            body=body[:content_length],
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str, str]:
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, uri, version = match.groups()
        if version not in self.SUPPORTED_VERSIONS:
            raise HTTPParseError(f"Unsupported HTTP version: {version}", status_code=505)

        # "/a%20b.txt?x=1" -> "/a b.txt"
        path = unquote(urlparse(uri).path) or "/"
        return method, uri, path, version

    def _parse_headers(self, lines: list[str]) -> Headers:
        """
        Parse header lines into a Headers multi-map.

        Repeated headers keep every value. Obsolete line folding (a line
        starting with whitespace) is rejected, as RFC 7230 §3.2.4 allows.
        """
        headers = Headers()

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                raise HTTPParseError("Obsolete header line folding is not supported")

            match = self.HEADER_PATTERN.match(line)
            if not match:
                raise HTTPParseError(f"Invalid header line: {line!r}")

            name, value = match.groups()
            headers.add(name.strip(), value.strip())

        return headers
