"""Classification values shared between drivers and their callers."""

from enum import StrEnum


class StorageTier(StrEnum):
    """Latency/durability class of a storage backend.

    Used by the archiving pipeline to rank backends. Drivers never
    branch on their own tier.
    """

    LOCAL = "local"
    REMOTE = "remote"
    COLD = "cold"


class StorageErrorKind(StrEnum):
    """Machine-readable kind carried by every StorageError.

    Callers branch on this value instead of parsing messages.
    """

    CONFIGURATION = "configuration"
    NOT_FOUND = "not_found"
    IO = "io"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    PATH_SAFETY = "path_safety"
    INTEGRITY = "integrity"
