"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m fileserver ./public --port 3000                 │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── FILESERVER_ROOT=./public FILESERVER_PORT=3000             │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The root directory is checked by validate() before the server binds a
socket: a server that would answer every request with 404 because of a
typo in its root should not start at all.

=============================================================================
"""

import os
import hashlib
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK      host, port, backlog, buffer_size, timeout, max_request_size
    THREADING    min_workers, max_workers
    CONTENT      root_dir, etag_algorithm
    LOGGING      log_level
    IDENTITY     server_name

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. "0.0.0.0" for every interface (containers)."""

    port: int = 8080
    """Port to listen on. 0 lets the OS pick a free one (tests)."""

    backlog: int = 128
    """Pending connections the kernel queues before refusing new ones."""

    buffer_size: int = 8192
    """
    Bytes per socket read, per file read while streaming a body, and per
    block fed to the ETag digest.
    """

    timeout: Optional[float] = 30.0
    """Socket timeout in seconds. None blocks forever."""

    max_request_size: int = 1024 * 1024
    """
    Largest accepted request (headers plus body). GET and HEAD requests
    are tiny; anything near this size is not a file request.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """Directory served at "/". Every request path resolves under it."""

    etag_algorithm: str = "md5"
    """hashlib algorithm used for ETags ("md5", "sha1", "sha256", ...)."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING or ERROR."""

    server_name: str = "fileserver/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        FILESERVER_HOST            Bind address (default: 127.0.0.1)
        FILESERVER_PORT            Port (default: 8080)
        FILESERVER_ROOT            Directory to serve (default: .)
        FILESERVER_WORKERS         Max worker threads (default: 16)
        FILESERVER_TIMEOUT         Socket timeout in seconds (default: 30)
        FILESERVER_ETAG_ALGORITHM  ETag digest (default: md5)
        FILESERVER_LOG_LEVEL       Logging level (default: INFO)

        =====================================================================
        """
        max_workers = int(os.getenv("FILESERVER_WORKERS", "16"))
        return cls(
            host=os.getenv("FILESERVER_HOST", "127.0.0.1"),
            port=int(os.getenv("FILESERVER_PORT", "8080")),
            root_dir=os.getenv("FILESERVER_ROOT", "."),
            min_workers=min(4, max_workers),
            max_workers=max_workers,
            timeout=float(os.getenv("FILESERVER_TIMEOUT", "30")),
            etag_algorithm=os.getenv("FILESERVER_ETAG_ALGORITHM", "md5"),
            log_level=os.getenv("FILESERVER_LOG_LEVEL", "INFO"),
        )

    @property
    def root_path(self) -> str:
        """The root directory as an absolute, symlink-free path."""
        return os.path.realpath(self.root_dir)

    def validate(self) -> None:
        """
        Validate configuration values; fail fast at startup.

        Raises:
            ValueError: Describing the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not os.path.isdir(self.root_dir):
            raise ValueError(f"Root directory does not exist: {self.root_dir}")

        if self.etag_algorithm not in hashlib.algorithms_available:
            raise ValueError(f"Unknown ETag algorithm: {self.etag_algorithm}")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {self.log_level}")
