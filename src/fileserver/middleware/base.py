"""
=============================================================================
HANDLER PIPELINE
=============================================================================

Middleware here is a plain function that takes a handler and returns a
new handler around it:

    Wrapper = Callable[[Handler], Handler]

    compose(handler, access_log, error_boundary)

        ┌─────────────────────────────────────────────────────────┐
        │  access_log                                             │
        │  ┌───────────────────────────────────────────────────┐  │
        │  │  error_boundary                                   │  │
        │  │  ┌─────────────────────────────────────────────┐  │  │
        │  │  │         FileRequestHandler.handle           │  │  │
        │  │  └─────────────────────────────────────────────┘  │  │
        │  └───────────────────────────────────────────────────┘  │
        └─────────────────────────────────────────────────────────┘

The first wrapper listed is the outermost one. Wrappers are applied in
reverse so that order reads the same way the request travels.

A handler returns None when the exchange was answered normally, or the
RequestError that was answered on its behalf (see error_boundary).

=============================================================================
"""

import logging
from typing import Callable, Optional

from ..core.exchange import Exchange
from ..errors import RequestError


logger = logging.getLogger(__name__)


Handler = Callable[[Exchange], Optional[RequestError]]
Wrapper = Callable[[Handler], Handler]


def compose(handler: Handler, *wrappers: Wrapper) -> Handler:
    """
    Wrap ``handler`` in ``wrappers``, first one outermost.

        compose(h, a, b)(exchange)  ==  a(b(h))(exchange)
    """
    current = handler
    for wrapper in reversed(wrappers):
        current = wrapper(current)
        logger.debug(f"Wrapped handler with {getattr(wrapper, '__name__', wrapper)}")
    return current
