"""
Unit tests for the directory tree and its text rendering.
"""

import os
import gc
from pathlib import Path

import pytest

from fileserver.errors import ListingError
from fileserver.model import DirectoryNode, build_tree, render


def lines(text: str) -> list[str]:
    return text.splitlines()


class TestBuildTree:
    """Tests for build_tree()."""

    def test_files_and_subdirectories(self, srv_root: Path):
        """Test that files and directories land in the right lists."""
        tree = build_tree(srv_root)

        assert tree.path == str(srv_root)
        assert tree.files == [str(srv_root / "a.txt")]
        assert [child.path for child in tree.sub_directories] == [str(srv_root / "sub")]
        assert tree.sub_directories[0].files == [str(srv_root / "sub" / "b.txt")]

    def test_parent_links(self, srv_root: Path):
        """Test that children point back at their parent."""
        tree = build_tree(srv_root)
        child = tree.sub_directories[0]

        assert tree.parent is None
        assert child.parent is tree

    def test_parent_does_not_keep_tree_alive(self, srv_root: Path):
        """Test that the back-reference is non-owning."""
        child = build_tree(srv_root).sub_directories[0]
        gc.collect()

        assert child.parent is None

    def test_relative_root_is_made_absolute(self, srv_root: Path, monkeypatch):
        """Test that a relative root path is resolved against the cwd."""
        monkeypatch.chdir(srv_root.parent)
        tree = build_tree("srv")

        assert os.path.isabs(tree.path)
        assert tree.files == [str(srv_root / "a.txt")]

    def test_empty_directory(self, tmp_path: Path):
        """Test that an empty directory produces an empty node."""
        tree = build_tree(tmp_path)

        assert tree.files == []
        assert tree.sub_directories == []

    def test_symlinked_directory_is_not_followed(self, srv_root: Path):
        """Test that a link back to the root does not loop forever."""
        try:
            os.symlink(srv_root, srv_root / "sub" / "loop", target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        tree = build_tree(srv_root)
        sub = tree.sub_directories[0]

        assert sub.sub_directories == []
        assert str(srv_root / "sub" / "loop") not in sub.files

    def test_symlinked_file_is_listed(self, srv_root: Path):
        """Test that a link to a regular file counts as a file."""
        try:
            os.symlink(srv_root / "a.txt", srv_root / "link.txt")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        tree = build_tree(srv_root)

        assert str(srv_root / "link.txt") in tree.files

    def test_dangling_symlink_is_skipped(self, srv_root: Path):
        """Test that a broken link is neither a file nor a directory."""
        try:
            os.symlink(srv_root / "missing", srv_root / "broken")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        tree = build_tree(srv_root)

        assert str(srv_root / "broken") not in tree.files

    def test_missing_root_raises_listing_error(self, tmp_path: Path):
        """Test that an unlistable directory aborts with ListingError."""
        missing = tmp_path / "missing"

        with pytest.raises(ListingError) as exc_info:
            build_tree(missing)

        assert exc_info.value.path == str(missing)
        assert isinstance(exc_info.value.__cause__, OSError)
        assert exc_info.value.status_code == 500

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="permissions are not enforced for root",
    )
    def test_unreadable_subdirectory_aborts_whole_listing(self, srv_root: Path):
        """Test that a failure deep in the tree is not swallowed."""
        locked = srv_root / "sub" / "locked"
        locked.mkdir()
        locked.chmod(0)
        try:
            with pytest.raises(ListingError) as exc_info:
                build_tree(srv_root)
            assert exc_info.value.path == str(locked)
        finally:
            locked.chmod(0o755)

    def test_deep_tree_does_not_recurse(self, tmp_path: Path):
        """Test a tree deeper than the default recursion limit."""
        path = tmp_path
        try:
            for _ in range(1100):
                path = path / "d"
                path.mkdir()
        except OSError:
            pytest.skip("filesystem path length limit")
        (path / "leaf.txt").write_bytes(b"")

        tree = build_tree(tmp_path)

        assert list(tree.iter_files()) == [str(path / "leaf.txt")]


class TestWalk:
    """Tests for DirectoryNode traversal order."""

    def test_pre_order_depth_first(self):
        """Test that a node comes before its children, siblings in order."""
        root = DirectoryNode("/r")
        a = DirectoryNode("/r/a", root)
        a1 = DirectoryNode("/r/a/1", a)
        b = DirectoryNode("/r/b", root)
        root.sub_directories = [a, b]
        a.sub_directories = [a1]

        assert [node.path for node in root.walk()] == ["/r", "/r/a", "/r/a/1", "/r/b"]

    def test_iter_files_order(self):
        """Test that own files come before any subdirectory's files."""
        root = DirectoryNode("/r")
        sub = DirectoryNode("/r/sub", root)
        root.sub_directories = [sub]
        root.files = ["/r/z.txt"]
        sub.files = ["/r/sub/a.txt", "/r/sub/b.txt"]

        assert list(root.iter_files()) == ["/r/z.txt", "/r/sub/a.txt", "/r/sub/b.txt"]


class TestRender:
    """Tests for render()."""

    def test_relative_to_root(self, srv_root: Path):
        """Test the listing of the sample tree."""
        text = render(build_tree(srv_root), srv_root)

        assert sorted(lines(text)) == ["a.txt", "sub/b.txt"]
        assert text.endswith("\n")

    def test_absolute_without_root(self, srv_root: Path):
        """Test that paths stay absolute when no root is given."""
        text = render(build_tree(srv_root))

        assert sorted(lines(text)) == sorted([
            str(srv_root / "a.txt").replace(os.sep, "/"),
            str(srv_root / "sub" / "b.txt").replace(os.sep, "/"),
        ])

    def test_relative_to_enclosing_root(self, srv_root: Path):
        """Test listing a subdirectory relative to the served root."""
        text = render(build_tree(srv_root / "sub"), srv_root)

        assert text == "sub/b.txt\n"

    def test_empty_tree_renders_empty(self, tmp_path: Path):
        """Test that a tree without files produces no output at all."""
        (tmp_path / "empty" / "deeper").mkdir(parents=True)

        assert render(build_tree(tmp_path), tmp_path) == ""

    def test_every_file_listed_once(self, tmp_path: Path):
        """Test a wider tree: every file exactly once, subtrees contiguous."""
        expected = set()
        for d in ("x", "x/y", "z"):
            (tmp_path / d).mkdir(parents=True, exist_ok=True)
            for name in ("1.txt", "2.txt"):
                (tmp_path / d / name).write_bytes(b"")
                expected.add(f"{d}/{name}")
        (tmp_path / "top.bin").write_bytes(b"")
        expected.add("top.bin")

        listed = lines(render(build_tree(tmp_path), tmp_path))

        assert sorted(listed) == sorted(expected)
        assert listed[0] == "top.bin"
        x_entries = [i for i, line in enumerate(listed) if line.startswith("x/")]
        assert x_entries == list(range(x_entries[0], x_entries[0] + 4))
        # a directory's own files precede its subdirectory's files
        assert listed.index("x/1.txt") < listed.index("x/y/1.txt")
