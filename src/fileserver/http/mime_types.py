"""
=============================================================================
MIME TYPE LOOKUP
=============================================================================

Maps a file name to the Content-Type the file handler sends with it.

=============================================================================
LOOKUP ORDER
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    FILENAME → CONTENT-TYPE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. MIME_TYPES table below      ".js"   → text/javascript          │
    │      (stable across platforms)   ".json" → application/json         │
    │                                                                      │
    │   2. mimetypes.guess_type()      ".epub" → application/epub+zip     │
    │      (system mime.types files)                                      │
    │                                                                      │
    │   3. DEFAULT_MIME_TYPE           ".xyz"  → application/octet-stream │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The table wins over the system database because /etc/mime.types differs
between hosts; the common web types should not change with the machine
the server runs on.

Text types get a "; charset=utf-8" parameter so browsers decode them
correctly.

=============================================================================
"""

import mimetypes
from pathlib import Path
from typing import Optional


MIME_TYPES = {
    # text
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".txt": "text/plain",
    ".log": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".json": "application/json",
    ".xml": "application/xml",
    ".yaml": "text/yaml",
    ".yml": "text/yaml",
    ".toml": "text/x-toml",
    ".py": "text/x-python",
    ".java": "text/x-java-source",
    ".sh": "text/x-shellscript",

    # images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",

    # fonts
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",

    # audio / video
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".mp4": "video/mp4",
    ".webm": "video/webm",

    # documents and archives
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
    ".wasm": "application/wasm",
}

# "No idea what this is, treat it as bytes"
DEFAULT_MIME_TYPE = "application/octet-stream"

TEXT_APPLICATION_TYPES = {
    "application/json",
    "application/xml",
    "application/javascript",
    "image/svg+xml",
}


def get_mime_type(path: str | Path, default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file from its extension.

    Examples:
        >>> get_mime_type("notes/a.txt")
        'text/plain'
        >>> get_mime_type("IMAGE.PNG")
        'image/png'
        >>> get_mime_type("blob.unknownext")
        'application/octet-stream'
    """
    path = Path(path)
    extension = path.suffix.lower()

    if extension in MIME_TYPES:
        return MIME_TYPES[extension]

    guessed, _ = mimetypes.guess_type(path.name, strict=False)
    return guessed or default or DEFAULT_MIME_TYPE


def is_text_type(mime_type: str) -> bool:
    """True for types that should be sent with a charset parameter."""
    return mime_type.startswith("text/") or mime_type in TEXT_APPLICATION_TYPES


def get_content_type(path: str | Path, charset: str = "utf-8") -> str:
    """
    Full Content-Type header value for a file.

        >>> get_content_type("index.html")
        'text/html; charset=utf-8'
        >>> get_content_type("photo.jpg")
        'image/jpeg'
    """
    mime_type = get_mime_type(path)
    if is_text_type(mime_type):
        return f"{mime_type}; charset={charset}"
    return mime_type
