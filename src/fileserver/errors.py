"""
=============================================================================
REQUEST ERRORS
=============================================================================

Exceptions that abort a request and carry the HTTP status code the client
should receive.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ERROR TAXONOMY                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   RequestError (status_code)                                        │
    │   ├── BadRequest      400   method is not GET or HEAD              │
    │   ├── Forbidden       403   path escapes the root directory        │
    │   ├── NotFound        404   path does not exist                    │
    │   └── ListingError    500   a directory could not be enumerated    │
    │                                                                      │
    │   Anything else is an unexpected failure: logged by the error      │
    │   boundary, never turned into a status code.                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from typing import Optional

from .http.status_codes import HTTPStatus


class RequestError(Exception):
    """
    Raised when a request cannot be served.

    The error boundary catches it, sends ``status_code`` with no body and
    hands the error back to the server for logging.
    """

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message or self.__class__.__name__)
        if status_code is not None:
            self.status_code = HTTPStatus(status_code)


class BadRequest(RequestError):
    """The request method is not supported."""

    status_code = HTTPStatus.BAD_REQUEST


class Forbidden(RequestError):
    """The resolved path lies outside the root directory."""

    status_code = HTTPStatus.FORBIDDEN


class NotFound(RequestError):
    """The resolved path does not exist."""

    status_code = HTTPStatus.NOT_FOUND


class ListingError(RequestError):
    """
    A directory could not be enumerated.

    Wraps the underlying OSError (available as ``__cause__``). Not
    recoverable: a failure anywhere in the tree aborts the whole listing.
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, path: str):
        super().__init__(f"Unable to list files from {path}")
        self.path = path
