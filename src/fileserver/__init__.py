"""
=============================================================================
FILESERVER - Directory Tree Server over HTTP/1.1
=============================================================================

Serves one directory over HTTP: GET or HEAD a file to receive its bytes
(with an ETag for conditional requests), GET or HEAD a directory to
receive a plain-text list of every file beneath it.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   $ fileserver /srv --port 8080                                      │
    │                                                                      │
    │   GET /          → 200  a.txt\nsub/b.txt\n      (text/plain)        │
    │   GET /a.txt     → 200  <bytes>   ETag: 0CC175B9C0F1B6A831C399E2... │
    │   GET /a.txt     → 304            If-None-Match: 0CC175B9C0F1B6A... │
    │   HEAD /a.txt    → 200  headers only                                │
    │   DELETE /a.txt  → 400                                               │
    │   GET /../etc    → 403                                               │
    │   GET /nope      → 404                                               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    fileserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m fileserver)
    ├── server.py            # FileServer: wires transport and handler
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # RequestError and its status-coded subclasses
    ├── hashing.py           # Streaming content digest for ETags
    ├── model/
    │   └── directory.py     # DirectoryNode tree, build_tree, render
    ├── handlers/
    │   └── files.py         # FileRequestHandler (GET/HEAD dispatch)
    ├── middleware/
    │   ├── base.py          # Handler type, compose()
    │   ├── boundary.py      # error_boundary
    │   └── logging.py       # access_log
    ├── http/
    │   ├── request.py       # Request parsing
    │   ├── headers.py       # Case-insensitive multi-valued headers
    │   ├── status_codes.py  # HTTPStatus
    │   └── mime_types.py    # Content-Type lookup
    └── core/
        ├── socket_server.py # Accept loop
        ├── connection.py    # Client socket wrapper
        ├── thread_pool.py   # Worker threads
        └── exchange.py      # One request/response pair

=============================================================================
QUICK START
=============================================================================

    from fileserver import FileServer, ServerConfig

    server = FileServer(ServerConfig(root_dir="/srv", port=8080))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileServer, create_server
from .config import ServerConfig

__all__ = ["FileServer", "create_server", "ServerConfig", "__version__"]
