"""
=============================================================================
FILE REQUEST HANDLER
=============================================================================

Answers GET and HEAD requests for anything under the root directory:
files are sent byte-for-byte with an ETag, directories come back as a
plain-text list of every file below them.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   START                                                              │
    │     │  method GET/HEAD? ─── no ──► BadRequest (400)                 │
    │     ▼                                                                │
    │   METHOD VALIDATED                                                   │
    │     │  under root? ───────── no ──► Forbidden (403)                 │
    │     │  exists? ───────────── no ──► NotFound  (404)                 │
    │     ▼                                                                │
    │   PATH RESOLVED                                                      │
    │     ├── directory ──► LISTING ──► 200 text/plain                    │
    │     │                                                                │
    │     └── file ──► ETag ──► If-None-Match == ETag? ── yes ──► 304     │
    │                                 │                                    │
    │                                 no                                   │
    │                                 ▼                                    │
    │                             200 + bytes (GET) / headers only (HEAD) │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The method is checked before the path is even looked at, so an
unsupported verb never touches the filesystem. A missing path is
rejected before any listing or hashing starts.

=============================================================================
PATH TRAVERSAL
=============================================================================

    GET /../../etc/passwd HTTP/1.1

    /srv/files/../../etc/passwd  ──resolve()──►  /etc/passwd
                                                 not under /srv/files
                                                 → 403 Forbidden

The canonical path (".." folded, symlinks followed) must still be
inside the root. Symlinks that stay inside the root keep working and
are served under the name that was requested.

=============================================================================
ETAGS
=============================================================================

The ETag is a digest of the file's bytes (see fileserver.hashing), so a
touched-but-unchanged file keeps its ETag and any change to a single
byte produces a new one. It is sent bare, exactly as computed, and
If-None-Match must repeat it exactly; weak validators (W/"...") are not
recognized. Hashes are recomputed on every request.

=============================================================================
"""

import os
import logging
from enum import Enum
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..core.exchange import Exchange, NO_BODY_CONTENT
from ..errors import BadRequest, Forbidden, NotFound
from ..hashing import content_hash, DEFAULT_ALGORITHM
from ..http.mime_types import get_content_type
from ..http.status_codes import HTTPStatus
from ..model.directory import build_tree, render


logger = logging.getLogger(__name__)

LISTING_CONTENT_TYPE = "text/plain"


class RequestMethod(Enum):
    """The methods this handler answers."""
    GET = "GET"
    HEAD = "HEAD"


@dataclass(frozen=True)
class Recognized:
    method: RequestMethod


@dataclass(frozen=True)
class Unrecognized:
    name: str


MethodMatch = Union[Recognized, Unrecognized]


def recognize_method(name: str) -> MethodMatch:
    """
    Classify a request method, case-insensitively.

        >>> recognize_method("head")
        Recognized(method=<RequestMethod.HEAD: 'HEAD'>)
        >>> recognize_method("PATCH")
        Unrecognized(name='PATCH')
    """
    try:
        return Recognized(RequestMethod(name.upper()))
    except ValueError:
        return Unrecognized(name)


class FileRequestHandler:
    """
    Serves files and directory listings from ``root_dir``.

    Usage:
        handler = FileRequestHandler("/srv/files")
        handler.handle(exchange)   # raises RequestError subclasses

    Wrap it with error_boundary() before giving it to the server; on its
    own it raises instead of answering errors.
    """

    def __init__(
        self,
        root_dir: str | os.PathLike,
        etag_algorithm: str = DEFAULT_ALGORITHM,
        buffer_size: int = 8192,
    ):
        self.root_dir = Path(root_dir).resolve()
        self.etag_algorithm = etag_algorithm
        self.buffer_size = buffer_size

        if not self.root_dir.is_dir():
            raise ValueError(f"Root directory does not exist: {root_dir}")

    def handle(self, exchange: Exchange) -> None:
        """
        Answer one request.

        Raises:
            BadRequest: Method other than GET or HEAD.
            Forbidden: Path resolves outside the root directory.
            NotFound: Nothing exists at the resolved path.
            ListingError: A directory in the listing could not be read.
            OSError: The file failed mid-transfer (headers already sent).
        """
        match = recognize_method(exchange.request_method)
        if isinstance(match, Unrecognized):
            raise BadRequest(f"Unsupported method: {match.name}")
        method = match.method

        path = self.resolve(exchange.request_path)

        if path.is_dir():
            self._send_listing(exchange, method, path)
        else:
            self._send_file(exchange, method, path)

    def resolve(self, request_path: str) -> Path:
        """
        Map a decoded URL path onto the filesystem.

        "/" and "" map to the root itself. Leading slashes are stripped so
        "//etc/passwd" cannot turn into an absolute path.

        The containment check runs on the canonical path (symlinks
        followed), but the returned path keeps the requested name: a
        link "alias -> sub" lists as "alias/..." and "page.html -> blob"
        is typed by its own extension.

        Raises:
            Forbidden: The canonical path leaves the root directory.
            NotFound: The canonical path does not exist.
        """
        relative = request_path.lstrip("/")
        full_path = Path(os.path.normpath(self.root_dir / relative))

        try:
            canonical = full_path.resolve()
        except (OSError, RuntimeError, ValueError):
            # symlink loops, embedded NUL bytes
            raise NotFound(f"Cannot resolve: {request_path}")

        if canonical != self.root_dir and not canonical.is_relative_to(self.root_dir):
            logger.warning(f"Path traversal attempt: {request_path}")
            raise Forbidden(f"Outside root: {request_path}")

        try:
            exists = canonical.exists()
        except (OSError, ValueError):
            exists = False
        if not exists:
            raise NotFound(f"No such file or directory: {request_path}")

        return full_path

    # =========================================================================
    # DIRECTORY LISTING
    # =========================================================================

    def _send_listing(self, exchange: Exchange, method: RequestMethod, path: Path) -> None:
        tree = build_tree(path)
        body = render(tree, self.root_dir).encode("utf-8")

        exchange.response_headers.set("Content-Type", LISTING_CONTENT_TYPE)

        if method is RequestMethod.HEAD:
            exchange.response_headers.set("Content-Length", str(len(body)))
            exchange.send_response_headers(HTTPStatus.OK, NO_BODY_CONTENT)
        else:
            exchange.send_response_headers(HTTPStatus.OK, len(body))
            exchange.response_body.write(body)

    # =========================================================================
    # FILE CONTENT
    # =========================================================================

    def _send_file(self, exchange: Exchange, method: RequestMethod, path: Path) -> None:
        etag = content_hash(path, self.etag_algorithm, self.buffer_size)
        if etag is not None:
            exchange.response_headers.set("ETag", etag)

            if etag in exchange.request_headers.get_all("If-None-Match"):
                exchange.send_response_headers(HTTPStatus.NOT_MODIFIED, NO_BODY_CONTENT)
                return

        size = path.stat().st_size
        exchange.response_headers.set("Content-Type", get_content_type(path))

        if method is RequestMethod.HEAD:
            exchange.response_headers.set("Content-Length", str(size))
            exchange.send_response_headers(HTTPStatus.OK, NO_BODY_CONTENT)
            return

        with open(path, "rb") as f:
            exchange.send_response_headers(HTTPStatus.OK, size)
            remaining = size
            while remaining > 0:
                chunk = f.read(min(self.buffer_size, remaining))
                if not chunk:
                    raise IOError(f"{path} shrank during transfer ({remaining} bytes missing)")
                exchange.response_body.write(chunk)
                remaining -= len(chunk)
