"""Shared contracts for the storage driver boundary.

This package is a LEAF MODULE with no outbound dependencies to core or
plugins. Settings classes are NOT re-exported here - import them from
archivestore.core.config.
"""

from archivestore.contracts.enums import StorageErrorKind, StorageTier
from archivestore.contracts.errors import (
    ConfigurationError,
    IntegrityError,
    NotFoundError,
    PathSafetyError,
    StorageError,
    StorageIOError,
    UnsupportedOperationError,
)
from archivestore.contracts.file_handle import FileHandle
from archivestore.contracts.storage import (
    ConfigAccessor,
    DriverInfo,
    FileMaterializer,
    RestoreTarget,
    StorageDriver,
    StoredFile,
)

__all__ = [  # Grouped by category for readability
    # Enums
    "StorageErrorKind",
    "StorageTier",
    # Errors
    "ConfigurationError",
    "IntegrityError",
    "NotFoundError",
    "PathSafetyError",
    "StorageError",
    "StorageIOError",
    "UnsupportedOperationError",
    # Value types
    "DriverInfo",
    "FileHandle",
    "RestoreTarget",
    # Protocols
    "ConfigAccessor",
    "FileMaterializer",
    "StorageDriver",
    "StoredFile",
]
