"""
=============================================================================
CORE TRANSPORT
=============================================================================

Low-level pieces that move bytes between clients and the file handler:

    socket_server.py  Accept loop, signal-driven shutdown
    connection.py     One client socket: read a request, send, close
    thread_pool.py    Worker threads that run one connection each
    exchange.py       One request/response pair; the handler's only
                      way to answer (headers once, then body bytes)

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool
from .exchange import Exchange, ResponseBody, NO_BODY_CONTENT

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
    "Exchange",
    "ResponseBody",
    "NO_BODY_CONTENT",
]
