"""Protocols for the storage driver contract and its collaborators.

Consolidated here so drivers, the registry and callers share a single
definition without importing each other:

- StoredFile: the generic file object a caller passes to ``store``
- RestoreTarget / FileMaterializer: how ``retrieve`` hands content back
- ConfigAccessor: per-driver configuration lookup, re-read on every call
- StorageDriver: the surface every backend implements
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol, runtime_checkable

from archivestore.contracts.enums import StorageTier

if TYPE_CHECKING:
    from archivestore.contracts.file_handle import FileHandle


@runtime_checkable
class StoredFile(Protocol):
    """A file object supplied by the host application."""

    @property
    def filename(self) -> str:
        """Base name of the file."""
        ...

    @property
    def filesize(self) -> int:
        """Length of the content in bytes."""
        ...

    @property
    def mime_type(self) -> str:
        """Best-effort content type."""
        ...

    def open(self) -> BinaryIO:
        """Open the content for streaming binary reads."""
        ...

    def copy_content_to(self, path: Path) -> None:
        """Copy the content byte-for-byte to an absolute path.

        Raises:
            OSError: If the copy fails
        """
        ...


@dataclass(frozen=True, slots=True)
class RestoreTarget:
    """Where and under what name a retrieved file should be materialized."""

    directory: Path
    filename: str
    mime_type: str | None = None


class FileMaterializer(Protocol):
    """Host routine that turns stored bytes into a caller file object."""

    def materialize(self, target: RestoreTarget, source_path: Path) -> StoredFile:
        """Create a file object for ``target`` from the bytes at ``source_path``.

        Raises:
            OSError: If the content cannot be materialized
        """
        ...


class ConfigAccessor(Protocol):
    """Key lookup into the host configuration, scoped by plugin name."""

    def get(self, plugin_name: str, key: str) -> Any:
        """Return the configured value, or None if unset."""
        ...


@dataclass(frozen=True, slots=True)
class DriverInfo:
    """Static description of a driver type.

    Answers the questions that do not depend on runtime state, so the
    registry can describe a backend without instantiating it.
    """

    plugin_name: str
    name: str
    storage_tier: StorageTier
    supports_retrieve: bool


@runtime_checkable
class StorageDriver(Protocol):
    """Contract every storage backend satisfies."""

    @classmethod
    def get_name(cls) -> str:
        """Human-readable backend name (display only)."""
        ...

    @classmethod
    def get_plugin_name(cls) -> str:
        """Stable machine identifier, written into every handle."""
        ...

    @classmethod
    def get_storage_tier(cls) -> StorageTier:
        """Latency/durability class of this backend."""
        ...

    @classmethod
    def supports_retrieve(cls) -> bool:
        """Whether ``retrieve`` may be called on this backend."""
        ...

    def is_available(self) -> bool:
        """Cheap, side-effect-free health check. Never raises."""
        ...

    def get_free_bytes(self) -> int | None:
        """Remaining capacity in bytes, or None if it cannot be determined."""
        ...

    def store(self, job_id: int | str, source_file: StoredFile, logical_path: str) -> FileHandle:
        """Place content and return a handle for it.

        Raises:
            StorageError: If the content could not be placed completely
        """
        ...

    def retrieve(self, handle: FileHandle, target: RestoreTarget) -> StoredFile:
        """Materialize previously stored content.

        Raises:
            UnsupportedOperationError: If the backend is write-only or the handle belongs to another backend
            NotFoundError: If the content is absent
            StorageError: If materialization fails
        """
        ...

    def delete(self, handle: FileHandle, strict: bool = False) -> None:
        """Remove stored content.

        Raises:
            UnsupportedOperationError: If the handle belongs to another backend
            NotFoundError: If the content is absent and ``strict`` is True
            StorageError: If removal fails
        """
        ...
