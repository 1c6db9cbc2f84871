"""
=============================================================================
FILESERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m fileserver

    # Serve ./public on every interface, port 3000
    python -m fileserver ./public --host 0.0.0.0 --port 3000

    # SHA-256 ETags, verbose logging
    python -m fileserver /srv --etag-algorithm sha256 --log-level DEBUG

Settings not given on the command line come from FILESERVER_* environment
variables (see ServerConfig.from_env), then from the defaults.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig
from .server import FileServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fileserver",
        description="Serve a directory tree over HTTP/1.1 (GET and HEAD)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fileserver                            # Serve . on 127.0.0.1:8080
  fileserver ./public --port 3000       # Custom root and port
  fileserver /srv --host 0.0.0.0        # Listen on all interfaces
  fileserver /srv --workers 8           # Up to 8 worker threads
        """,
    )

    parser.add_argument(
        "root",
        nargs="?",
        default=None,
        help="Directory to serve (default: $FILESERVER_ROOT or .)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)",
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Maximum number of worker threads (default: 16)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT / LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--etag-algorithm",
        default=None,
        help="hashlib digest used for ETags (default: md5)",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"fileserver {__version__}",
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment-derived config with command-line values on top."""
    config = ServerConfig.from_env()

    if args.root is not None:
        config.root_dir = args.root
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.max_workers = args.workers
        config.min_workers = min(config.min_workers, args.workers)
    if args.etag_algorithm is not None:
        config.etag_algorithm = args.etag_algorithm
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        server = FileServer(config_from_args(args))
    except ValueError as e:
        parser.error(str(e))

    try:
        server.run()
    except OSError as e:
        print(f"fileserver: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
