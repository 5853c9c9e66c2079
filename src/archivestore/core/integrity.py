"""Content hashing for stored archive files.

The same routine stamps the checksum onto a FileHandle at store time and
verifies restored content afterwards. Both sides stream the content in
fixed-size chunks, so arbitrarily large archives never need to fit in
memory.
"""

import hashlib
import hmac
from pathlib import Path
from typing import BinaryIO

from archivestore.contracts.errors import IntegrityError
from archivestore.contracts.file_handle import FileHandle
from archivestore.contracts.storage import StoredFile

__all__ = [
    "CHUNK_SIZE",
    "hash_bytes",
    "hash_file",
    "hash_path",
    "hash_stream",
    "verify_checksum",
]

CHUNK_SIZE = 64 * 1024


def hash_stream(stream: BinaryIO) -> str:
    """Compute the SHA-256 hex digest of a binary stream, read to EOF."""
    sha256 = hashlib.sha256()
    for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
        sha256.update(chunk)
    return sha256.hexdigest()


def hash_bytes(content: bytes) -> str:
    """Compute the SHA-256 hex digest of in-memory content."""
    return hashlib.sha256(content).hexdigest()


def hash_path(path: Path) -> str:
    """Compute the SHA-256 hex digest of a file on disk."""
    with path.open("rb") as f:
        return hash_stream(f)


def hash_file(file: StoredFile) -> str:
    """Compute the SHA-256 hex digest of a caller-supplied file object."""
    with file.open() as f:
        return hash_stream(f)


def verify_checksum(handle: FileHandle, file: StoredFile) -> None:
    """Verify that restored content matches the checksum on its handle.

    Raises:
        IntegrityError: If the recomputed hash differs from handle.checksum
    """
    actual = hash_file(file)
    # Timing-safe comparison, same as payload verification elsewhere
    if not hmac.compare_digest(actual, handle.checksum):
        raise IntegrityError(
            f"Integrity check failed for {handle.relative_path}: expected {handle.checksum}, got {actual}",
            backend=handle.backend_name,
        )
