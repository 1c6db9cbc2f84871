"""
=============================================================================
HTTP HEADERS
=============================================================================

A case-insensitive multi-map for request and response headers.

Header names are case-insensitive (RFC 7230), and a header may appear
more than once, so every name maps to a LIST of values:

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Raw lines                        Headers                          │
    │   ─────────                        ───────                          │
    │   If-None-Match: ABC               "if-none-match" → ["ABC", "DEF"] │
    │   if-none-match: DEF                                                │
    │   Host: localhost                  "host"          → ["localhost"]  │
    └─────────────────────────────────────────────────────────────────────┘

Keys are stored lowercase for lookup, while the spelling of the first
occurrence is kept for serialization, so responses go out as
"Content-Type" and not "content-type".

=============================================================================
"""

from typing import Dict, Iterator, List, Optional, Tuple


class Headers:
    """
    Case-insensitive mapping of header name to a list of values.

    Usage:
        headers = Headers()
        headers.add("ETag", "9E107D9D372BB6826BD81D3542A419D6")
        headers.set("Content-Length", "42")

        headers.get("etag")          # first value
        headers.get_all("ETAG")      # every value
        "content-length" in headers  # True
    """

    def __init__(self, items: Optional[Dict[str, object]] = None):
        # lowercase name → (display name, values)
        self._entries: Dict[str, Tuple[str, List[str]]] = {}
        for name, value in (items or {}).items():
            if isinstance(value, (list, tuple)):
                for item in value:
                    self.add(name, item)
            else:
                self.add(name, value)

    def add(self, name: str, value: object) -> "Headers":
        """Append a value, keeping any existing ones."""
        key = name.lower()
        if key in self._entries:
            self._entries[key][1].append(str(value))
        else:
            self._entries[key] = (name, [str(value)])
        return self

    def set(self, name: str, value: object) -> "Headers":
        """Replace every value of ``name`` with a single one."""
        self._entries[name.lower()] = (name, [str(value)])
        return self

    def setdefault(self, name: str, value: object) -> "Headers":
        """Set ``name`` only when it is not present yet."""
        if name.lower() not in self._entries:
            self.set(name, value)
        return self

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value of ``name``, or ``default``."""
        entry = self._entries.get(name.lower())
        return entry[1][0] if entry else default

    def get_all(self, name: str) -> List[str]:
        """Every value of ``name`` (empty list when absent)."""
        entry = self._entries.get(name.lower())
        return list(entry[1]) if entry else []

    def items(self) -> Iterator[Tuple[str, str]]:
        """
        Yield ``(name, value)`` pairs in insertion order.

        A multi-valued header yields one pair per value, which is how it
        is written on the wire.
        """
        for display_name, values in self._entries.values():
            for value in values:
                yield display_name, value

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return (display_name for display_name, _ in self._entries.values())

    def __repr__(self) -> str:
        return f"Headers({dict((k, v) for k, (_, v) in self._entries.items())!r})"
