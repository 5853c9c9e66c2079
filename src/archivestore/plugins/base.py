"""Base class for storage drivers.

BaseStorageDriver implements the parts of the driver contract that are
identical for every backend:

- static capability questions answered from class attributes, so the
  registry can describe a backend without instantiating it
- logical path normalization and path-safety checks
- checksum computation and FileHandle construction around ``_place``,
  so no backend can return a handle for content it failed to place
- the free-space availability policy
- refusing ``retrieve`` on write-only backends

Subclasses set the class attributes and implement ``get_free_bytes``,
``_place`` and ``_delete``, plus ``_retrieve`` when they support it.

Example:
    class ColdVaultDriver(BaseStorageDriver):
        plugin_name = "coldvault"
        display_name = "Cold vault"
        storage_tier = StorageTier.COLD
        retrieve_supported = False
        ...
"""

from abc import ABC, abstractmethod
from typing import ClassVar

from archivestore.contracts.enums import StorageTier
from archivestore.contracts.errors import PathSafetyError, StorageError, StorageIOError, UnsupportedOperationError
from archivestore.contracts.file_handle import FileHandle
from archivestore.contracts.storage import (
    ConfigAccessor,
    DriverInfo,
    FileMaterializer,
    RestoreTarget,
    StoredFile,
)
from archivestore.core.files import LocalFileMaterializer
from archivestore.core.integrity import hash_file
from archivestore.core.logging import get_logger

__all__ = ["MIN_FREE_BYTES", "BaseStorageDriver", "normalize_logical_path", "validate_filename"]

logger = get_logger(__name__)

# Backends with this much free space or less report unavailable
MIN_FREE_BYTES = 1024 * 1024 * 1024

_SEPARATORS = ("/", "\\")

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


def normalize_logical_path(logical_path: str) -> str:
    """Strip leading/trailing separators and reject traversal.

    Args:
        logical_path: Caller-supplied relative path ("" or "/" for root)

    Returns:
        Path without leading/trailing "/"

    Raises:
        PathSafetyError: If any segment is ".." or the path contains NUL
    """
    if "\x00" in logical_path:
        raise PathSafetyError(f"Logical path contains NUL byte: {logical_path!r}")

    normalized = logical_path.strip("/")
    segments = normalized.replace("\\", "/").split("/")
    if ".." in segments:
        raise PathSafetyError(f"Logical path must not contain '..' segments: {logical_path!r}")
    return normalized


def validate_filename(filename: str) -> str:
    """Ensure a filename names exactly one entry inside its directory.

    Raises:
        PathSafetyError: If the name is empty, ".", "..", or contains a separator or NUL
    """
    if filename in ("", ".", ".."):
        raise PathSafetyError(f"Invalid filename: {filename!r}")
    if any(sep in filename for sep in _SEPARATORS) or "\x00" in filename:
        raise PathSafetyError(f"Filename must not contain path separators: {filename!r}")
    return filename


class BaseStorageDriver(ABC):
    """Base class for storage driver plugins.

    Drivers hold no state besides their collaborators. Configuration is
    looked up through the injected accessor on every operation.
    """

    plugin_name: ClassVar[str]
    display_name: ClassVar[str]
    storage_tier: ClassVar[StorageTier]
    retrieve_supported: ClassVar[bool] = True

    def __init__(self, config: ConfigAccessor, materializer: FileMaterializer | None = None) -> None:
        self._config = config
        self._materializer: FileMaterializer = materializer if materializer is not None else LocalFileMaterializer()

    # === Static capabilities ===

    @classmethod
    def get_name(cls) -> str:
        return cls.display_name

    @classmethod
    def get_plugin_name(cls) -> str:
        return cls.plugin_name

    @classmethod
    def get_storage_tier(cls) -> StorageTier:
        return cls.storage_tier

    @classmethod
    def supports_retrieve(cls) -> bool:
        return cls.retrieve_supported

    @classmethod
    def info(cls) -> DriverInfo:
        """Describe this driver type without instantiating it."""
        return DriverInfo(
            plugin_name=cls.plugin_name,
            name=cls.display_name,
            storage_tier=cls.storage_tier,
            supports_retrieve=cls.retrieve_supported,
        )

    # === Runtime state ===

    def is_enabled(self) -> bool:
        """Read the ``enabled`` toggle. Unset means enabled.

        Advisory like ``is_available``: unreadable configuration reports
        disabled instead of raising. String values are parsed as flags;
        anything unrecognized reports disabled.
        """
        try:
            value = self._config.get(self.plugin_name, "enabled")
        except StorageError as e:
            logger.warning("Could not read enabled flag", backend=self.plugin_name, error=str(e))
            return False
        if value is None:
            return True
        if isinstance(value, str):
            # Host settings stores keep checkbox values as strings such as "1"/"0"
            normalized = value.strip().lower()
            if normalized in _TRUE_STRINGS:
                return True
            if normalized not in _FALSE_STRINGS:
                logger.warning("Unrecognized enabled flag, treating as disabled", backend=self.plugin_name, value=value)
            return False
        return bool(value)

    def is_available(self) -> bool:
        """Available iff free space is known and exceeds MIN_FREE_BYTES."""
        free_bytes = self.get_free_bytes()
        return free_bytes is not None and free_bytes > MIN_FREE_BYTES

    @abstractmethod
    def get_free_bytes(self) -> int | None:
        """Remaining capacity, or None if it cannot be determined. Never raises."""
        ...

    # === Operations ===

    def store(self, job_id: int | str, source_file: StoredFile, logical_path: str) -> FileHandle:
        """Place ``source_file`` under ``logical_path`` and return its handle.

        The handle is built before placement so backends can use its
        fields, but it only leaves this method once ``_place`` returned.

        Raises:
            PathSafetyError: If the path or filename would escape the root
            StorageError: If the backend failed to place the content
        """
        normalized = normalize_logical_path(logical_path)
        filename = validate_filename(source_file.filename)

        try:
            size_bytes = source_file.filesize
            checksum = hash_file(source_file)
        except OSError as e:
            raise StorageIOError(f"Cannot read source file {filename!r}: {e}", backend=self.plugin_name) from e

        handle = FileHandle(
            job_id=job_id,
            backend_name=self.plugin_name,
            filename=filename,
            logical_path=normalized,
            size_bytes=size_bytes,
            checksum=checksum,
            mime_type=source_file.mime_type,
        )

        try:
            self._place(handle, source_file)
        except StorageError as e:
            logger.warning(
                "Store failed, discarding handle",
                job_id=job_id,
                backend=self.plugin_name,
                path=str(handle.relative_path),
                error_kind=str(e.kind),
            )
            raise
        return handle

    def retrieve(self, handle: FileHandle, target: RestoreTarget) -> StoredFile:
        """Materialize stored content into the caller's file representation.

        The checksum is not re-verified here; callers use
        ``archivestore.core.integrity.verify_checksum``.

        Raises:
            UnsupportedOperationError: If this backend is write-only or the handle belongs to another backend
            NotFoundError: If the content is absent
            StorageError: If materialization fails
        """
        if not self.supports_retrieve():
            raise UnsupportedOperationError("Backend does not support retrieve", backend=self.plugin_name)
        self._check_owner(handle)
        return self._retrieve(handle, target)

    def delete(self, handle: FileHandle, strict: bool = False) -> None:
        """Remove stored content.

        Deleting absent content is a no-op unless ``strict`` is set.

        Raises:
            UnsupportedOperationError: If the handle belongs to another backend
            NotFoundError: If the content is absent and ``strict`` is True
            StorageError: If removal fails
        """
        self._check_owner(handle)
        self._delete(handle, strict)

    def _check_owner(self, handle: FileHandle) -> None:
        if handle.backend_name != self.plugin_name:
            raise UnsupportedOperationError(
                f"Handle belongs to backend '{handle.backend_name}', not '{self.plugin_name}'",
                backend=self.plugin_name,
            )
        normalize_logical_path(handle.logical_path)
        validate_filename(handle.filename)

    @abstractmethod
    def _place(self, handle: FileHandle, source_file: StoredFile) -> None:
        """Durably place the content described by ``handle``.

        Must leave no content discoverable under the handle's path on
        failure, and must raise a StorageError subclass rather than
        returning normally.
        """
        ...

    def _retrieve(self, handle: FileHandle, target: RestoreTarget) -> StoredFile:
        # Only reached when retrieve_supported is True
        raise NotImplementedError(f"{type(self).__name__} declares retrieve support but does not implement _retrieve")

    @abstractmethod
    def _delete(self, handle: FileHandle, strict: bool) -> None: ...
