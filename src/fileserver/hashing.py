"""
=============================================================================
CONTENT HASHING (ETAGS)
=============================================================================

Computes the ETag of a file from its bytes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    STREAMING DIGEST                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   file  ──readinto──►  buffer (8 KB, reused)  ──update──►  digest   │
    │            ▲                                                 │       │
    │            └──────────── until readinto() returns 0 ─────────┘       │
    │                                                                      │
    │   Memory stays at one buffer whatever the file size.                │
    │   The loop ends on end-of-stream (0 bytes read), never on a         │
    │   full buffer, so the last block is always digested.                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The digest is best-effort metadata. If the algorithm is not available
(e.g. md5 on a FIPS-restricted build) or the file cannot be read, the
result is None and the response simply goes out without an ETag.

=============================================================================
"""

import hashlib
import logging
import os
from typing import Optional


logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "md5"
DEFAULT_BUFFER_SIZE = 8192


def content_hash(
    path: str | os.PathLike,
    algorithm: str = DEFAULT_ALGORITHM,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> Optional[str]:
    """
    Digest of a file's content as an uppercase hex string.

    Args:
        path: File to hash.
        algorithm: Any name hashlib.new() accepts ("md5", "sha256", ...).
        buffer_size: Size of the single read buffer.

    Returns:
        e.g. "D41D8CD98F00B204E9800998ECF8427E" for an empty file with md5,
        or None when the digest could not be computed.
    """
    try:
        digest = hashlib.new(algorithm)
    except ValueError as e:
        logger.warning(f"Digest algorithm {algorithm!r} unavailable: {e}")
        return None

    buffer = bytearray(buffer_size)
    view = memoryview(buffer)
    try:
        with open(path, "rb", buffering=0) as f:
            while True:
                read = f.readinto(buffer)
                if not read:
                    break
                digest.update(view[:read])
    except OSError as e:
        logger.warning(f"Could not hash {path}: {e}")
        return None

    return digest.hexdigest().upper()
