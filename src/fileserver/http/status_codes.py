"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can produce, with their reason phrases.

    HTTP/1.1 304 Not Modified
             ─── ────────────
              │       └── Reason phrase (informational only)
              └────────── Status code (what clients act on)

Only the codes that the file handler, the error boundary and the
transport actually emit are listed here. The enum extends IntEnum, so
members compare equal to plain integers:

    >>> HTTPStatus.NOT_FOUND == 404
    True
    >>> HTTPStatus.NOT_FOUND.phrase
    'Not Found'

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """HTTP status codes used by the file server."""

    # 2xx SUCCESS
    OK = 200                            # File bytes or directory listing
    NO_CONTENT = 204

    # 3xx REDIRECTION
    NOT_MODIFIED = 304                  # If-None-Match matched the ETag

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400                   # Unsupported method, malformed request
    FORBIDDEN = 403                     # Path escapes the root directory
    NOT_FOUND = 404                     # Nothing at the resolved path
    REQUEST_TIMEOUT = 408               # Client never finished sending
    PAYLOAD_TOO_LARGE = 413             # Request exceeded max_request_size

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500         # Directory listing failed
    SERVICE_UNAVAILABLE = 503           # Thread pool saturated
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx codes."""
        return self >= 400

    @property
    def allows_body(self) -> bool:
        """
        Whether a response with this status may carry a body.

        1xx, 204 and 304 responses never have one (RFC 7230 §3.3.3),
        so the transport must not announce a Content-Length for them.
        """
        return not (self < 200 or self in (HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED))


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
