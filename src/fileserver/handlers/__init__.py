"""
=============================================================================
HANDLERS MODULE
=============================================================================

The request handler behind every URL the server answers.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST → HANDLER → EXCHANGE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    Request                 Handler                 Exchange         │
    │   ┌─────────┐           ┌─────────┐           ┌─────────┐          │
    │   │ GET     │           │ resolve │           │ 200 OK  │          │
    │   │ /docs/  │ ────────▶ │ list or │ ────────▶ │ a.txt   │          │
    │   │         │           │ stream  │           │ b/c.txt │          │
    │   └─────────┘           └─────────┘           └─────────┘          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A handler writes its response into the Exchange and raises a
RequestError subclass when it cannot; turning those into status codes is
the job of fileserver.middleware.error_boundary.

=============================================================================
"""

from .files import (
    FileRequestHandler,
    RequestMethod,
    Recognized,
    Unrecognized,
    recognize_method,
)

__all__ = [
    "FileRequestHandler",
    "RequestMethod",
    "Recognized",
    "Unrecognized",
    "recognize_method",
]
