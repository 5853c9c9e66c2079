"""Driver for storing archive data inside a directory on the local filesystem.

Layout: <storage_path>/<logical_path>/<filename>

No sidecar metadata is written; the FileHandle returned by ``store`` is
the only record of what was placed.
"""

import hmac
import os
import shutil
import uuid
from pathlib import Path, PurePosixPath

from archivestore.contracts.enums import StorageTier
from archivestore.contracts.errors import (
    ConfigurationError,
    NotFoundError,
    PathSafetyError,
    StorageError,
    StorageIOError,
)
from archivestore.contracts.file_handle import FileHandle
from archivestore.contracts.storage import RestoreTarget, StoredFile
from archivestore.core.integrity import hash_path
from archivestore.core.logging import get_logger
from archivestore.plugins.base import BaseStorageDriver

__all__ = ["LocalDirDriver"]

logger = get_logger(__name__)


class LocalDirDriver(BaseStorageDriver):
    """Stores archive files below a configured local directory.

    The storage root comes from the ``storage_path`` setting and is looked
    up on every call. It must already exist; the driver only creates
    directories beneath it.
    """

    plugin_name = "localdir"
    display_name = "Local directory"
    storage_tier = StorageTier.LOCAL
    retrieve_supported = True

    def _storage_root(self) -> Path:
        """Resolve the configured storage root.

        Raises:
            ConfigurationError: If storage_path is unset, relative, or not an existing directory
        """
        value = self._config.get(self.plugin_name, "storage_path")
        if not value:
            raise ConfigurationError("storage_path is not configured", backend=self.plugin_name)
        root = Path(value)
        if not root.is_absolute():
            raise ConfigurationError(f"storage_path must be an absolute path, got {value!r}", backend=self.plugin_name)
        if not root.is_dir():
            raise ConfigurationError(f"storage_path does not exist or is not a directory: {root}", backend=self.plugin_name)
        return root

    def _path_under_root(self, root: Path, relative: PurePosixPath) -> Path:
        """Join ``relative`` onto ``root`` and verify containment.

        Segments were already checked for "..", but a symlink inside the
        root can still point elsewhere, so the resolved path is compared too.

        Raises:
            PathSafetyError: If the resolved path is not under the resolved root
        """
        path = root.joinpath(*relative.parts)
        resolved = path.resolve()
        root_resolved = root.resolve()
        if not resolved.is_relative_to(root_resolved):
            raise PathSafetyError(f"Path {resolved} escapes storage root {root_resolved}", backend=self.plugin_name)
        return path

    def get_free_bytes(self) -> int | None:
        try:
            root = self._storage_root()
            return shutil.disk_usage(root).free
        except (StorageError, OSError) as e:
            logger.debug("Free space unknown", backend=self.plugin_name, error=str(e))
            return None

    def _place(self, handle: FileHandle, source_file: StoredFile) -> None:
        root = self._storage_root()
        target_dir = self._path_under_root(root, PurePosixPath(handle.logical_path))
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"Failed to create directory {target_dir}: {e}", backend=self.plugin_name) from e

        target = self._path_under_root(root, handle.relative_path)
        # Written under a hidden temporary name, then renamed into place, so
        # a failed copy never shows up under the handle's filename
        partial = target_dir / f".{handle.filename}.{uuid.uuid4().hex}.partial"
        try:
            source_file.copy_content_to(partial)
            written = partial.stat().st_size
            if written != handle.size_bytes:
                raise StorageIOError(
                    f"Incomplete copy of {handle.filename}: wrote {written} of {handle.size_bytes} bytes",
                    backend=self.plugin_name,
                )
            if not hmac.compare_digest(hash_path(partial), handle.checksum):
                raise StorageIOError(
                    f"Checksum mismatch after copying {handle.filename}: stored bytes differ from the source",
                    backend=self.plugin_name,
                )
            os.replace(partial, target)
        except OSError as e:
            self._discard_partial(partial)
            raise StorageIOError(f"Failed to store {target}: {e}", backend=self.plugin_name) from e
        except StorageIOError:
            self._discard_partial(partial)
            raise

        logger.info(
            "Stored file",
            job_id=handle.job_id,
            backend=self.plugin_name,
            path=str(target),
            size_bytes=handle.size_bytes,
        )

    def _discard_partial(self, partial: Path) -> None:
        # Best effort; the copy error is re-raised by the caller
        try:
            partial.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove partial file", backend=self.plugin_name, path=str(partial), error=str(e))

    def _retrieve(self, handle: FileHandle, target: RestoreTarget) -> StoredFile:
        root = self._storage_root()
        path = self._path_under_root(root, handle.relative_path)
        if not path.is_file():
            raise NotFoundError(f"Stored file not found: {path}", backend=self.plugin_name)

        try:
            restored = self._materializer.materialize(target, path)
        except OSError as e:
            raise StorageIOError(f"Failed to restore {path}: {e}", backend=self.plugin_name) from e

        logger.info("Retrieved file", job_id=handle.job_id, backend=self.plugin_name, path=str(path))
        return restored

    def _delete(self, handle: FileHandle, strict: bool) -> None:
        root = self._storage_root()
        path = self._path_under_root(root, handle.relative_path)
        if not path.is_file():
            if strict:
                raise NotFoundError(f"Stored file not found: {path}", backend=self.plugin_name)
            logger.debug("Delete of absent file ignored", job_id=handle.job_id, backend=self.plugin_name, path=str(path))
            return

        try:
            path.unlink()
        except OSError as e:
            raise StorageIOError(f"Failed to delete {path}: {e}", backend=self.plugin_name) from e

        logger.info("Deleted file", job_id=handle.job_id, backend=self.plugin_name, path=str(path))
        self._prune_empty_directory(root, path.parent)

    def _prune_empty_directory(self, root: Path, directory: Path) -> None:
        """Remove ``directory`` if it is empty. Single level; never the root."""
        if directory.resolve() == root.resolve():
            return
        try:
            if any(directory.iterdir()):
                return
            directory.rmdir()
        except OSError as e:
            # The file itself is gone; a leftover empty directory is harmless
            logger.warning("Could not remove empty directory", backend=self.plugin_name, path=str(directory), error=str(e))
