"""
A storage backend rooted at a directory on the local disk.

File I/O goes through aiofiles so no call blocks the event loop; whole-tree
operations (listing, recursive delete) run in a worker thread.
"""

import asyncio
import errno
import logging
import shutil
import stat
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path, PurePosixPath

import aiofiles
import aiofiles.os

from localstore.exceptions import EntryNotFoundError, StorageBackendError
from localstore.models.handles import FileHandle, FolderHandle

from .base import AsyncBinaryStream, CollisionPolicy, StorageBackend

log = logging.getLogger(__name__)

_NOT_FOUND_ERRORS = (FileNotFoundError, NotADirectoryError)


def _translate(error: OSError, logical_path: PurePosixPath) -> StorageBackendError:
    """Maps an OSError onto the backend error taxonomy."""
    if isinstance(error, _NOT_FOUND_ERRORS):
        return EntryNotFoundError(f"'{logical_path.as_posix()}' does not exist.")
    return StorageBackendError(
        f"I/O failure on '{logical_path.as_posix()}': {error.strerror or error}"
    )


class LocalDiskBackend(StorageBackend):
    """Stores folders and files below ``root_dir``."""

    kind = "local"

    def __init__(self, root_dir: Path, create: bool = True):
        """
        Initializes the backend.

        Args:
            root_dir: The directory that acts as the storage root.
            create: Create ``root_dir`` (and its parents) when it is missing.
        """
        self.root_dir = Path(root_dir)
        if create:
            self.root_dir.mkdir(parents=True, exist_ok=True)

    def _abs(self, logical_path: PurePosixPath) -> Path:
        return self.root_dir.joinpath(*logical_path.parts)

    async def _stat_mode(self, logical_path: PurePosixPath) -> int | None:
        """Returns the st_mode of an entry, or None if it does not exist."""
        try:
            result = await aiofiles.os.stat(self._abs(logical_path))
        except _NOT_FOUND_ERRORS:
            return None
        except ValueError:
            # Names with embedded NUL bytes cannot exist on disk
            return None
        except OSError as e:
            if e.errno == errno.ENAMETOOLONG:
                return None
            raise _translate(e, logical_path) from e
        return result.st_mode

    async def get_child_folder(
        self, parent: FolderHandle, name: str
    ) -> FolderHandle | None:
        child = parent.child_path(name)
        mode = await self._stat_mode(child)
        if mode is None or not stat.S_ISDIR(mode):
            return None
        return FolderHandle(child)

    async def get_file(self, parent: FolderHandle, name: str) -> FileHandle | None:
        child = parent.child_path(name)
        mode = await self._stat_mode(child)
        if mode is None or not stat.S_ISREG(mode):
            return None
        return FileHandle(child)

    async def create_file(
        self, parent: FolderHandle, name: str, policy: CollisionPolicy
    ) -> FileHandle:
        target = parent.path.joinpath(*self.split_name(name))
        if target == parent.path:
            raise StorageBackendError("A file name is required.")

        mode = await self._stat_mode(target)
        if mode is not None and stat.S_ISDIR(mode):
            raise StorageBackendError(f"'{target.as_posix()}' is a folder.")

        # "ab" opens without truncating; "wb" leaves a zero-length file
        open_mode = "ab" if policy is CollisionPolicy.OPEN_IF_EXISTS else "wb"
        try:
            async with aiofiles.open(self._abs(target), open_mode):
                pass
        except OSError as e:
            raise _translate(e, target) from e
        return FileHandle(target)

    async def create_folder(
        self, parent: FolderHandle, name: str, policy: CollisionPolicy
    ) -> FolderHandle:
        target = parent.path.joinpath(*self.split_name(name))
        if target == parent.path:
            raise StorageBackendError("A folder name is required.")

        mode = await self._stat_mode(target)
        if mode is not None:
            if not stat.S_ISDIR(mode):
                raise StorageBackendError(f"'{target.as_posix()}' is a file.")
            if policy is CollisionPolicy.OPEN_IF_EXISTS:
                return FolderHandle(target)
            await self.delete_folder(FolderHandle(target))

        try:
            await aiofiles.os.mkdir(self._abs(target))
        except FileExistsError:
            # Lost a race with a concurrent creator
            if policy is CollisionPolicy.REPLACE_EXISTING:
                raise StorageBackendError(
                    f"'{target.as_posix()}' was recreated while being replaced."
                ) from None
        except OSError as e:
            raise _translate(e, target) from e
        return FolderHandle(target)

    async def delete_file(self, file: FileHandle) -> None:
        try:
            await aiofiles.os.remove(self._abs(file.path))
        except OSError as e:
            raise _translate(e, file.path) from e

    async def delete_folder(self, folder: FolderHandle) -> None:
        if folder.is_root:
            raise StorageBackendError("The storage root cannot be deleted.")
        try:
            await asyncio.to_thread(shutil.rmtree, self._abs(folder.path))
        except OSError as e:
            raise _translate(e, folder.path) from e

    def _scan_sync(self, folder: FolderHandle) -> tuple[list[str], list[str]]:
        """Synchronous implementation for listing the children of a folder."""
        files, folders = [], []
        for entry in self._abs(folder.path).iterdir():
            if entry.is_dir():
                folders.append(entry.name)
            elif entry.is_file():
                files.append(entry.name)
        return sorted(files), sorted(folders)

    async def _scan(self, folder: FolderHandle) -> tuple[list[str], list[str]]:
        try:
            return await asyncio.to_thread(self._scan_sync, folder)
        except OSError as e:
            raise _translate(e, folder.path) from e

    async def list_files(self, folder: FolderHandle) -> list[FileHandle]:
        files, _ = await self._scan(folder)
        return [FileHandle(folder.child_path(name)) for name in files]

    async def list_folders(self, folder: FolderHandle) -> list[FolderHandle]:
        _, folders = await self._scan(folder)
        return [FolderHandle(folder.child_path(name)) for name in folders]

    @asynccontextmanager
    async def open_for_read_write(
        self, file: FileHandle
    ) -> AsyncIterator[AsyncBinaryStream]:
        try:
            stream = await aiofiles.open(self._abs(file.path), "r+b")
        except OSError as e:
            raise _translate(e, file.path) from e
        try:
            yield stream
        finally:
            await stream.close()

    async def read_all_bytes(self, file: FileHandle) -> bytes:
        try:
            async with aiofiles.open(self._abs(file.path), "rb") as f:
                return await f.read()
        except OSError as e:
            raise _translate(e, file.path) from e

    async def write_all_text(
        self, file: FileHandle, text: str, encoding: str = "utf-8"
    ) -> None:
        data = self.encode_text(file, text, encoding)
        try:
            # "r+b" never creates, so a deleted file stays deleted
            async with aiofiles.open(self._abs(file.path), "r+b") as f:
                await f.write(data)
                await f.truncate()
        except OSError as e:
            raise _translate(e, file.path) from e
        log.debug(f"Wrote {len(data)} bytes of text to '{file}'.")
