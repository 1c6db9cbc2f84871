"""
=============================================================================
DIRECTORY TREE
=============================================================================

Snapshot of a directory with all of its files and subdirectories, used to
answer a request for a directory with a plain-text listing.

=============================================================================
TREE SHAPE
=============================================================================

    /srv                             DirectoryNode(path="/srv")
    ├── a.txt                          files:          ["/srv/a.txt"]
    ├── sub/                           sub_directories:
    │   └── b.txt                        DirectoryNode(path="/srv/sub")
    └── loop -> /srv  (symlink)            files: ["/srv/sub/b.txt"]
                                       ("loop" is skipped)

    Rendered relative to /srv:

        a.txt
        sub/b.txt

Each node OWNS its children. The parent link is a weak reference used
only to walk upwards; it never keeps a node alive.

=============================================================================
WHY SYMLINKED DIRECTORIES ARE SKIPPED
=============================================================================

A link may point back at one of its ancestors ("loop" above). Following
it would recurse forever, so directory links are never entered. Links
to regular files are listed like any other file.

=============================================================================
"""

import os
import weakref
import logging
from collections import deque
from typing import Iterator, List, Optional

from ..errors import ListingError


logger = logging.getLogger(__name__)


class DirectoryNode:
    """
    One directory as it looked when the tree was built.

    Attributes:
        path:            Absolute filesystem path of the directory.
        files:           Absolute paths of the regular files directly in
                         it, in filesystem enumeration order.
        sub_directories: Child nodes, in enumeration order.
        parent:          Enclosing node, or None for the root of the tree.
    """

    __slots__ = ("_path", "_parent", "files", "sub_directories", "__weakref__")

    def __init__(self, path: str, parent: Optional["DirectoryNode"] = None):
        self._path = path
        self._parent = weakref.ref(parent) if parent is not None else None
        self.files: List[str] = []
        self.sub_directories: List["DirectoryNode"] = []

    @property
    def path(self) -> str:
        return self._path

    @property
    def parent(self) -> Optional["DirectoryNode"]:
        """The enclosing node, or None at the root (or once it is gone)."""
        return self._parent() if self._parent is not None else None

    def walk(self) -> Iterator["DirectoryNode"]:
        """
        Yield this node and every descendant, depth-first, pre-order.

        Children are visited in the order they were discovered.
        """
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.sub_directories))

    def iter_files(self) -> Iterator[str]:
        """Every file in the tree, in listing order."""
        for node in self.walk():
            yield from node.files

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return (
            f"DirectoryNode({self._path!r}, files={len(self.files)}, "
            f"sub_directories={len(self.sub_directories)})"
        )


def build_tree(root_path: str | os.PathLike) -> DirectoryNode:
    """
    Walk ``root_path`` into a DirectoryNode tree.

    =====================================================================
    TRAVERSAL
    =====================================================================

    Every directory is enumerated once with os.scandir():

        regular file (or link to one)   → node.files
        directory, not a symlink        → new child node, queued
        symlink to a directory          → skipped (cycle prevention)
        anything else                   → skipped (fifo, socket, broken link)

    Pending directories live on an explicit stack instead of the call
    stack, so a very deep tree cannot hit the recursion limit. Each node
    fills its own lists when it is scanned, so the resulting order is the
    same as a recursive walk.

    =====================================================================

    Args:
        root_path: Directory to list. Made absolute before the walk.

    Returns:
        The root node of the tree.

    Raises:
        ListingError: A directory could not be enumerated. Nothing is
                      returned for the rest of the tree.
    """
    root = DirectoryNode(os.path.abspath(root_path))
    pending = deque([root])
    scanned = 0

    while pending:
        node = pending.pop()
        scanned += 1
        try:
            with os.scandir(node.path) as entries:
                for entry in entries:
                    if entry.is_file():
                        node.files.append(entry.path)
                    elif entry.is_dir(follow_symlinks=False):
                        child = DirectoryNode(entry.path, parent=node)
                        node.sub_directories.append(child)
                        pending.append(child)
        except OSError as e:
            raise ListingError(node.path) from e

    logger.debug(f"Listed {root.path}: {scanned} directories")
    return root


def render(node: DirectoryNode, root_dir: Optional[str | os.PathLike] = None) -> str:
    """
    Render the tree as one file path per line.

    Paths are relative to ``root_dir`` (absolute when it is None) and
    always use forward slashes. A node's own files come first, then each
    subdirectory in turn. Every line ends with a newline; an empty tree
    renders as the empty string.

    Example:
        >>> render(build_tree("/srv"), "/srv")
        'a.txt\\nsub/b.txt\\n'
    """
    lines = []
    for path in node.iter_files():
        if root_dir is not None:
            path = os.path.relpath(path, root_dir)
        lines.append(path.replace(os.sep, "/") + "\n")
    return "".join(lines)
