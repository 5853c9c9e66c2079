"""Filesystem-backed file objects for hosts without their own file layer.

LocalStoredFile satisfies the StoredFile protocol for a plain path on
disk, and LocalFileMaterializer is the matching restore routine used by
drivers when ``retrieve`` hands content back to the caller.
"""

import mimetypes
import shutil
from pathlib import Path
from typing import BinaryIO

from archivestore.contracts.storage import RestoreTarget

__all__ = ["DEFAULT_MIME_TYPE", "LocalFileMaterializer", "LocalStoredFile"]

DEFAULT_MIME_TYPE = "application/octet-stream"


class LocalStoredFile:
    """A StoredFile backed by a regular file on the local filesystem.

    Size is read from the filesystem on each access rather than cached,
    so the object always describes the file as it currently is.
    """

    def __init__(self, path: Path, *, filename: str | None = None, mime_type: str | None = None) -> None:
        self._path = path
        self._filename = filename if filename is not None else path.name
        if mime_type is None:
            guessed, _ = mimetypes.guess_type(self._filename)
            mime_type = guessed or DEFAULT_MIME_TYPE
        self._mime_type = mime_type

    def __repr__(self) -> str:
        return f"LocalStoredFile(path={str(self._path)!r}, filename={self._filename!r}, mime_type={self._mime_type!r})"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def filesize(self) -> int:
        return self._path.stat().st_size

    @property
    def mime_type(self) -> str:
        return self._mime_type

    def open(self) -> BinaryIO:
        return self._path.open("rb")

    def copy_content_to(self, path: Path) -> None:
        # copyfile copies bytes only; permissions come from the target umask
        shutil.copyfile(self._path, path)


class LocalFileMaterializer:
    """Restore routine that copies stored bytes into ``target.directory``.

    The directory is created if missing. An existing file with the same
    name is replaced.
    """

    def materialize(self, target: RestoreTarget, source_path: Path) -> LocalStoredFile:
        target.directory.mkdir(parents=True, exist_ok=True)
        destination = target.directory / target.filename
        shutil.copyfile(source_path, destination)
        return LocalStoredFile(destination, mime_type=target.mime_type)
