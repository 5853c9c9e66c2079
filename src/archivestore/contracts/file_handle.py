"""FileHandle: the record a driver hands back for every stored blob.

The handle is the sole source of metadata about stored content. Drivers
write no sidecar files, so the caller persists the handle (see
``to_dict``/``from_dict``) and presents it again to retrieve or delete.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, fields
from pathlib import Path, PurePosixPath
from typing import Any

from archivestore.contracts.storage import RestoreTarget

__all__ = ["FileHandle"]

# SHA-256 hex digest: exactly 64 lowercase hex characters
_SHA256_HEX_PATTERN = re.compile(r"^[a-f0-9]{64}$")


@dataclass(frozen=True, slots=True)
class FileHandle:
    """Immutable reference to content placed by a storage driver.

    Only ``store`` creates handles, and only after the bytes are durably
    placed. A handle that exists therefore always refers to content that
    was written completely at some point.

    Attributes:
        job_id: Identifier of the owning archive job (opaque to drivers)
        backend_name: ``plugin_name`` of the driver that stored the content
        filename: Original base name of the content, preserved verbatim
        logical_path: Normalized caller path ("" means backend root)
        size_bytes: Byte length of the content at store time
        checksum: SHA-256 hex digest of the content at store time
        mime_type: Best-effort content type
    """

    job_id: int | str
    backend_name: str
    filename: str
    logical_path: str
    size_bytes: int
    checksum: str
    mime_type: str

    def __post_init__(self) -> None:
        if not self.backend_name:
            raise ValueError("backend_name must not be empty")
        if not self.filename:
            raise ValueError("filename must not be empty")
        if self.logical_path != self.logical_path.strip("/"):
            raise ValueError(f"logical_path must be normalized (no leading/trailing '/'), got {self.logical_path!r}")
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must be >= 0, got {self.size_bytes}")
        if not _SHA256_HEX_PATTERN.match(self.checksum):
            raise ValueError(f"checksum must be 64 lowercase hex characters, got {self.checksum!r:.50}")

    @property
    def relative_path(self) -> PurePosixPath:
        """Location of the content relative to the backend root."""
        if not self.logical_path:
            return PurePosixPath(self.filename)
        return PurePosixPath(self.logical_path) / self.filename

    def retrieval_target(self, directory: Path) -> RestoreTarget:
        """Build the descriptor for restoring this content into ``directory``.

        The restored file keeps the original filename and MIME type.
        """
        return RestoreTarget(directory=directory, filename=self.filename, mime_type=self.mime_type)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dict for persistence by the caller."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileHandle:
        """Rebuild a handle persisted with ``to_dict``.

        Raises:
            ValueError: If keys are missing or unknown, or a field is invalid
        """
        expected = {f.name for f in fields(cls)}
        missing = expected - data.keys()
        if missing:
            raise ValueError(f"FileHandle data is missing keys: {sorted(missing)}")
        unknown = data.keys() - expected
        if unknown:
            raise ValueError(f"FileHandle data has unknown keys: {sorted(unknown)}")
        return cls(**data)
