"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps an accepted client socket with what the file server needs: read one
complete request, write response bytes, close the socket properly.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

A request sent as one piece can arrive in several:

    recv() → b"GET /docs/rea"
    recv() → b"dme.txt HTTP/1.1\r\nHost: x\r\n"
    recv() → b"\r\n"

So we buffer until the blank line that ends the headers (\r\n\r\n), then
read exactly Content-Length more bytes for the body.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
              │                                       ▲
              └──── client hung up / timeout ─────────┘

Every response is sent with "Connection: close", so a connection carries
exactly one request.

=============================================================================
"""

import socket
import time
import uuid
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and close bookkeeping."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used in log lines.
        state: Current ConnectionState.
        created_at: When the connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    max_request_size: int = 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request from the socket.

        Returns:
            The request bytes (headers, blank line, body), or None if the
            client closed the connection before sending a full header block.

        Raises:
            TimeoutError: The client stopped sending.
            ValueError: The request exceeds max_request_size.
        """
        self.state = ConnectionState.READING

        try:
            # ─────────────────────────────────────────────────────────────
            # STEP 1: Buffer until the end of the headers
            # ─────────────────────────────────────────────────────────────
            while b"\r\n\r\n" not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return None
                self._buffer += chunk
                if len(self._buffer) > self.max_request_size:
                    raise ValueError(f"Request too large: {len(self._buffer)} bytes")

            # ─────────────────────────────────────────────────────────────
            # STEP 2: Read the body announced by Content-Length
            # ─────────────────────────────────────────────────────────────
            header_end = self._buffer.find(b"\r\n\r\n")
            body_start = header_end + 4
            content_length = self._parse_content_length(self._buffer[:header_end])

            if body_start + content_length > self.max_request_size:
                raise ValueError(f"Request too large: {body_start + content_length} bytes")

            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break  # the parser reports the short body
                self._buffer += chunk

            request_end = body_start + content_length
            request_data, self._buffer = self._buffer[:request_end], self._buffer[request_end:]
            return request_data

        except socket.timeout:
            raise TimeoutError("Request read timeout")

    def _recv(self) -> bytes:
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _parse_content_length(self, headers: bytes) -> int:
        """
        Find Content-Length in raw header bytes.

        Needed before the request can be parsed, so this is a plain line
        scan. Invalid values count as 0 and are rejected by the parser.
        """
        for line in headers.decode("latin-1").lower().split("\r\n"):
            if line.startswith("content-length:"):
                try:
                    return max(int(line.split(":", 1)[1].strip()), 0)
                except ValueError:
                    return 0
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def sendall(self, data: bytes) -> None:
        """
        Send bytes to the client.

        Raises OSError (e.g. BrokenPipeError) when the client went away;
        a response that fails half-way cannot be repaired.
        """
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)

    def send_quietly(self, data: bytes) -> bool:
        """Best-effort send for error replies; False if the client is gone."""
        try:
            self.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    @property
    def closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    def close(self) -> None:
        """
        Close the connection. Idempotent.

        1. shutdown(SHUT_WR) sends FIN so the client sees end-of-response
        2. drain briefly so unread request bytes do not trigger an RST
        3. close() releases the file descriptor
        """
        if self.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
