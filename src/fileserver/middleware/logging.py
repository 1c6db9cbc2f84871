"""
=============================================================================
ACCESS LOG
=============================================================================

One line per exchange on the "fileserver.access" logger:

    127.0.0.1 "GET /docs/a.txt" 200 1234 0.52ms
    127.0.0.1 "HEAD /missing" 404 0 0.08ms

    client_ip  "method path"  status  body bytes sent  duration

Status "-" means no status line went out (the handler failed before
sending headers).

The logger is namespaced so it can be routed on its own:

    logging.getLogger("fileserver.access").addHandler(file_handler)

=============================================================================
"""

import time
import logging
from functools import wraps
from typing import Optional

from ..core.exchange import Exchange
from ..errors import RequestError
from .base import Handler


logger = logging.getLogger("fileserver.access")


def access_log(handler: Handler, level: int = logging.INFO) -> Handler:
    """Log every exchange ``handler`` processes, after it finishes."""

    @wraps(handler)
    def logged(exchange: Exchange) -> Optional[RequestError]:
        start_time = time.perf_counter()
        try:
            return handler(exchange)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            status = exchange.status if exchange.status is not None else "-"
            logger.log(
                level,
                f'{exchange.request.client_ip} "{exchange.request_method} '
                f'{exchange.request.uri}" {status} {exchange.bytes_sent} '
                f"{duration_ms:.2f}ms",
            )

    return logged
