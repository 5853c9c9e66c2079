"""Storage error hierarchy.

Every failure a driver reports is a StorageError subclass with a
class-level ``kind``. Wrapped OS errors are chained via ``raise ... from``
so the original errno stays inspectable.
"""

from typing import ClassVar

from archivestore.contracts.enums import StorageErrorKind


class StorageError(Exception):
    """Base class for all driver failures.

    Subclasses set ``kind``. The base class is never raised directly by
    built-in drivers.
    """

    kind: ClassVar[StorageErrorKind]

    def __init__(self, message: str, *, backend: str | None = None) -> None:
        super().__init__(message)
        self.backend = backend

    def __str__(self) -> str:
        message = super().__str__()
        if self.backend is None:
            return message
        return f"[{self.backend}] {message}"


class ConfigurationError(StorageError):
    """Storage root is unset or does not exist."""

    kind = StorageErrorKind.CONFIGURATION


class NotFoundError(StorageError):
    """Referenced content is absent from the backend."""

    kind = StorageErrorKind.NOT_FOUND


class StorageIOError(StorageError):
    """Directory or file create, write, remove or materialization failed.

    Named to avoid shadowing the builtin ``IOError`` (an ``OSError`` alias).
    """

    kind = StorageErrorKind.IO


class UnsupportedOperationError(StorageError):
    """The backend does not support the requested capability."""

    kind = StorageErrorKind.UNSUPPORTED_OPERATION


class PathSafetyError(StorageError):
    """A logical path or filename would escape the storage root."""

    kind = StorageErrorKind.PATH_SAFETY


class IntegrityError(StorageError):
    """Restored content does not match the checksum recorded on its handle.

    Never raised by drivers themselves; callers raise it through
    ``archivestore.core.integrity.verify_checksum``.
    """

    kind = StorageErrorKind.INTEGRITY
