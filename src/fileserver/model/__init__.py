"""
Filesystem models used to answer directory requests.
"""

from .directory import DirectoryNode, build_tree, render

__all__ = [
    "DirectoryNode",
    "build_tree",
    "render",
]
