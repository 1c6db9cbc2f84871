"""
=============================================================================
HTTP PROTOCOL PIECES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py       Raw bytes → HTTPRequest (method, uri, path,       │
    │                  headers, body)                                     │
    │ headers.py       Case-insensitive multi-valued header map          │
    │ status_codes.py  HTTPStatus enum with reason phrases               │
    │ mime_types.py    File name → Content-Type                          │
    └─────────────────────────────────────────────────────────────────────┘

Responses are not built as objects here: the file handler writes them
through an Exchange (see fileserver.core.exchange), which lets file
bodies be streamed instead of loaded into memory.

=============================================================================
"""

from .headers import Headers
from .request import HTTPRequest, RequestParser, HTTPParseError
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, get_content_type

__all__ = [
    "Headers",
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "HTTPStatus",
    "get_mime_type",
    "get_content_type",
]
