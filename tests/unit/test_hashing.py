"""
Unit tests for Git object hashing

Hashes must match what a Git host reports for the same blob, byte for byte.
"""

import pytest

from schemapub.core.hashing import blob_hash, git_object_hash


class TestBlobHash:
    def test_empty_blob_matches_git(self) -> None:
        """Should match `git hash-object` for the empty file"""
        assert blob_hash(b"") == "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"

    def test_hello_world_matches_git(self) -> None:
        """Should match `printf 'hello world\\n' | git hash-object --stdin`"""
        assert blob_hash(b"hello world\n") == "3b18e512dba79e4c8300dd08aeb37f8e728b8dad"

    def test_deterministic(self) -> None:
        content = b"export class Hero {}\n"
        assert blob_hash(content) == blob_hash(bytes(content))

    def test_single_byte_change_changes_hash(self) -> None:
        assert blob_hash(b"hp: 10") != blob_hash(b"hp: 11")

    def test_trailing_newline_is_significant(self) -> None:
        """Should not normalize line endings or trailing newlines"""
        assert blob_hash(b"data") != blob_hash(b"data\n")
        assert blob_hash(b"a\n") != blob_hash(b"a\r\n")

    def test_rejects_text(self) -> None:
        with pytest.raises(TypeError):
            blob_hash("not bytes")  # type: ignore[arg-type]


class TestGitObjectHash:
    def test_blob_type_equals_blob_hash(self) -> None:
        assert git_object_hash("blob", b"abc") == blob_hash(b"abc")

    def test_object_type_is_part_of_hash(self) -> None:
        assert git_object_hash("tree", b"abc") != git_object_hash("blob", b"abc")
