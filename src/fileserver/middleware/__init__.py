"""
=============================================================================
MIDDLEWARE
=============================================================================

Handler wrappers applied around the file handler:

    error_boundary   RequestError → status code; cleanup of every exchange
    access_log       one log line per exchange

Assembled with compose(), outermost first:

    handler = compose(files.handle, access_log, error_boundary)

=============================================================================
"""

from .base import Handler, Wrapper, compose
from .boundary import error_boundary
from .logging import access_log

__all__ = [
    "Handler",
    "Wrapper",
    "compose",
    "error_boundary",
    "access_log",
]
