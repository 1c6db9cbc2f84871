"""
Unit tests for content hashing.
"""

import hashlib
from pathlib import Path

import pytest

from fileserver.hashing import content_hash


class TestContentHash:
    """Tests for content_hash()."""

    def test_md5_of_known_content(self, tmp_path: Path):
        """Test against a digest computed independently."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"hello")

        assert content_hash(path) == "5D41402ABC4B2A76B9719D911017C592"

    def test_empty_file(self, tmp_path: Path):
        """Test the digest of zero bytes."""
        path = tmp_path / "empty"
        path.write_bytes(b"")

        assert content_hash(path) == "D41D8CD98F00B204E9800998ECF8427E"

    def test_uppercase_hex(self, tmp_path: Path):
        """Test that the digest is uppercase hexadecimal."""
        path = tmp_path / "f"
        path.write_bytes(b"\x00\xff" * 10)

        digest = content_hash(path)
        assert digest == digest.upper()
        int(digest, 16)

    def test_stable_across_calls(self, tmp_path: Path):
        """Test that unchanged content gives the same value every time."""
        path = tmp_path / "f"
        path.write_bytes(b"same bytes")

        assert content_hash(path) == content_hash(path)

    def test_changes_with_one_byte(self, tmp_path: Path):
        """Test that flipping a single byte changes the digest."""
        path = tmp_path / "f"
        path.write_bytes(b"abcdef")
        before = content_hash(path)

        path.write_bytes(b"abcdeg")

        assert content_hash(path) != before

    @pytest.mark.parametrize("size", [100, 8192, 8193, 3 * 8192, 3 * 8192 + 1])
    def test_whole_stream_is_digested(self, tmp_path: Path, size: int):
        """Test sizes around the buffer boundary, including exact multiples."""
        data = bytes(i % 251 for i in range(size))
        path = tmp_path / "f"
        path.write_bytes(data)

        assert content_hash(path, buffer_size=8192) == hashlib.md5(data).hexdigest().upper()

    def test_last_block_counts(self, tmp_path: Path):
        """Test that a change confined to the final partial block is seen."""
        data = bytearray(b"x" * (2 * 64 + 5))
        path = tmp_path / "f"
        path.write_bytes(bytes(data))
        before = content_hash(path, buffer_size=64)

        data[-1] = ord("y")
        path.write_bytes(bytes(data))

        assert content_hash(path, buffer_size=64) != before

    def test_other_algorithm(self, tmp_path: Path):
        """Test a non-default algorithm."""
        path = tmp_path / "f"
        path.write_bytes(b"hello")

        assert content_hash(path, "sha256") == hashlib.sha256(b"hello").hexdigest().upper()

    def test_unknown_algorithm_returns_none(self, tmp_path: Path):
        """Test that an unavailable digest means no ETag, not an error."""
        path = tmp_path / "f"
        path.write_bytes(b"hello")

        assert content_hash(path, "no-such-digest") is None

    def test_missing_file_returns_none(self, tmp_path: Path):
        """Test that an unreadable file means no ETag, not an error."""
        assert content_hash(tmp_path / "missing") is None

    def test_directory_returns_none(self, tmp_path: Path):
        """Test that hashing a directory fails quietly."""
        assert content_hash(tmp_path) is None
