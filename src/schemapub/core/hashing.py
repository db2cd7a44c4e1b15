"""
Git Object Hashing

Computes object ids exactly the way Git (and therefore the hosting service)
does, so a local artifact can be compared against the sha the remote reports
without downloading anything.
"""

import hashlib

BLOB = "blob"


def git_object_hash(object_type: str, content: bytes) -> str:
    """Hash raw bytes as a Git object of the given type

    Args:
        object_type: Git object type ("blob", "tree", "commit")
        content: Raw object bytes. Never decoded, so line endings and
            encodings are hashed exactly as they will be stored.

    Returns:
        40-character lowercase hex SHA-1

    Example:
        >>> git_object_hash("blob", b"")
        'e69de29bb2d1d6434b8b29ae775ad8c2e48c5391'
    """
    if not isinstance(content, (bytes, bytearray, memoryview)):
        raise TypeError(f"content must be bytes, got {type(content).__name__}")

    data = bytes(content)
    header = f"{object_type} {len(data)}\0".encode("ascii")
    return hashlib.sha1(header + data).hexdigest()


def blob_hash(content: bytes) -> str:
    """Hash file content as a Git blob"""
    return git_object_hash(BLOB, content)
