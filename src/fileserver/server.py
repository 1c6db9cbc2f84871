"""
=============================================================================
FILE SERVER
=============================================================================

Ties the pieces together into a running server.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   FileServer    │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────────┐    │
    │    │ SocketServer │    │  ThreadPool  │    │ FileRequestHandler│    │
    │    │  (accept)    │    │  (workers)   │    │ + error_boundary  │    │
    │    └──────┬───────┘    └──────┬───────┘    │ + access_log      │    │
    │           ▼                   ▼            └──────────────────┘    │
    │    ┌──────────────┐    ┌──────────────┐                            │
    │    │  Connection  │───►│   Exchange   │                            │
    │    └──────────────┘    └──────────────┘                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts the TCP connection
    2. The connection is queued on the ThreadPool (503 if the queue is full)
    3. A worker reads and parses one request (400/408/413/505 on failure)
    4. An Exchange is built around the request and the connection
    5. The handler chain answers it: access_log → error_boundary → files
    6. error_boundary closes the exchange, which closes the connection

Transport-level failures (malformed request line, timeout, oversize
request) are answered here, before an Exchange exists. Everything after
that point is answered by the handler chain.

=============================================================================
"""

import logging
from email.utils import formatdate
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool, Exchange
from .core.exchange import Sink
from .errors import RequestError
from .handlers import FileRequestHandler
from .http import HTTPRequest, RequestParser, HTTPParseError, HTTPStatus, Headers
from .middleware import Handler, compose, access_log, error_boundary


logger = logging.getLogger(__name__)


class FileServer:
    """
    Serves one directory tree over HTTP/1.1.

    Usage:
        server = FileServer(ServerConfig(root_dir="/srv", port=8080))
        server.run()            # blocks until Ctrl+C or shutdown()

    From another thread (tests, embedding):
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready(5.0)
        host, port = server.address
        ...
        server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        # ─────────────────────────────────────────────────────────────────
        # TRANSPORT
        # ─────────────────────────────────────────────────────────────────

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        # ─────────────────────────────────────────────────────────────────
        # APPLICATION
        # ─────────────────────────────────────────────────────────────────

        self.files = FileRequestHandler(
            self.config.root_path,
            etag_algorithm=self.config.etag_algorithm,
            buffer_size=self.config.buffer_size,
        )
        self._handler: Handler = compose(self.files.handle, access_log, error_boundary)

        self._running = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def address(self) -> Tuple[str, int]:
        """The (host, port) the server is listening on."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    def run(self):
        """Start serving (blocking)."""
        self._running = True
        self._setup_logging()
        self._thread_pool.start()

        logger.info(
            f"Serving {self.config.root_path} on {self.config.host}:{self.config.port} "
            f"({self.config.min_workers}-{self.config.max_workers} workers)"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is bound. False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Stop accepting connections; run() returns once workers finish."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("fileserver").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Queue a connection for a worker; runs on the accept thread."""
        try:
            submitted = self._thread_pool.submit(self._process_connection, args=(conn,))
        except RuntimeError:
            submitted = False

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            self._send_status(conn, HTTPStatus.SERVICE_UNAVAILABLE)
            conn.close()

    def _process_connection(self, conn: Connection):
        """Read, parse and answer one request (runs in a worker thread)."""
        with conn:
            try:
                raw_request = conn.read_request()
            except TimeoutError:
                logger.info(f"[{conn.id}] Request timeout from {conn.client_ip}")
                self._send_status(conn, HTTPStatus.REQUEST_TIMEOUT)
                return
            except ValueError as e:
                logger.info(f"[{conn.id}] {e}")
                self._send_status(conn, HTTPStatus.PAYLOAD_TOO_LARGE)
                return

            if raw_request is None:
                return

            try:
                request = self._parser.parse(raw_request, conn.address)
            except HTTPParseError as e:
                logger.info(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
                self._send_status(conn, e.status_code)
                return

            self.serve(request, conn)

    def serve(self, request: HTTPRequest, sink: Sink) -> Optional[RequestError]:
        """
        Answer ``request`` by writing to ``sink`` and close it afterwards.

        Returns:
            The RequestError that was answered, or None.
        """
        exchange = Exchange(request, sink, server_name=self.config.server_name)
        error = self._handler(exchange)
        if error is not None:
            logger.debug(f"{request.method} {request.path} answered with {int(error.status_code)}")
        return error

    def _send_status(self, conn: Connection, status: int):
        """Status-only reply for requests that never reached a handler."""
        status = HTTPStatus(status)
        headers = Headers({
            "Content-Length": "0",
            "Date": formatdate(usegmt=True),
            "Server": self.config.server_name,
            "Connection": "close",
        })
        lines = [f"HTTP/1.1 {int(status)} {status.phrase}"]
        lines.extend(f"{name}: {value}" for name, value in headers.items())
        conn.send_quietly(("\r\n".join(lines) + "\r\n\r\n").encode("latin-1"))


def create_server(config: Optional[ServerConfig] = None, **overrides) -> FileServer:
    """
    Build a FileServer from a config plus keyword overrides.

        server = create_server(root_dir="./public", port=0)
    """
    config = config or ServerConfig()
    for name, value in overrides.items():
        if not hasattr(config, name):
            raise TypeError(f"Unknown setting: {name}")
        setattr(config, name, value)
    return FileServer(config)
