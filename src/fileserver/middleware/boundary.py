"""
=============================================================================
ERROR BOUNDARY
=============================================================================

Wraps a handler so that every exchange ends the same way, whatever the
handler did:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   handler(exchange)                                                  │
    │     │                                                                │
    │     ├── returns ─────────────────────────────────► result = None    │
    │     │                                                                │
    │     ├── raises RequestError (400/403/404/500)                       │
    │     │     send its status, no body ──────────────► result = error   │
    │     │                                                                │
    │     └── raises anything else                                        │
    │           log with traceback ────────────────────► result = None    │
    │                                                                      │
    │   ALWAYS, exactly once and in this order:                           │
    │     request_body.close() → response_body.close() → exchange.close() │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The structured error is handed back instead of re-raised, so callers can
log or count it without a try/except of their own. An unexpected error
gets no status of its own: if the handler had not sent headers yet the
client sees the connection close without a response.

If the handler already sent headers before raising, the status line is
out and cannot be replaced; the error is still returned and the
connection is closed.

=============================================================================
"""

import logging
from contextlib import ExitStack
from functools import wraps
from typing import Optional

from ..core.exchange import Exchange, NO_BODY_CONTENT
from ..errors import RequestError
from .base import Handler


logger = logging.getLogger(__name__)


def error_boundary(handler: Handler) -> Handler:
    """
    Wrap ``handler`` with error-to-status translation and cleanup.

    Returns:
        A handler returning the RequestError that was answered, or None.
    """

    @wraps(handler)
    def bounded(exchange: Exchange) -> Optional[RequestError]:
        with ExitStack() as cleanup:
            # callbacks run last-in first-out
            cleanup.callback(exchange.close)
            cleanup.callback(exchange.response_body.close)
            cleanup.callback(exchange.request_body.close)

            try:
                handler(exchange)
            except RequestError as e:
                logger.info(
                    f"{exchange.request_method} {exchange.request_path} -> "
                    f"{int(e.status_code)} {type(e).__name__}: {e}"
                )
                _send_status(exchange, e)
                return e
            except Exception:
                logger.exception(
                    f"Unhandled error serving {exchange.request_method} {exchange.request_path}"
                )
            return None

    return bounded


def _send_status(exchange: Exchange, error: RequestError) -> None:
    if exchange.headers_sent:
        logger.warning(
            f"Cannot send {int(error.status_code)} for {exchange.request_path}: "
            f"headers already sent ({exchange.status})"
        )
        return
    try:
        exchange.send_response_headers(error.status_code, NO_BODY_CONTENT)
    except OSError as e:
        logger.warning(f"Failed to send {int(error.status_code)} to client: {e}")
