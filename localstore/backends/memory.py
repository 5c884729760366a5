"""
An in-process storage backend. Used by the tests and for ephemeral stores.
"""

import io
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from localstore.exceptions import EntryNotFoundError, StorageBackendError
from localstore.models.handles import FileHandle, FolderHandle

from .base import CollisionPolicy, StorageBackend


@dataclass
class _Node:
    folders: dict[str, "_Node"] = field(default_factory=dict)
    files: dict[str, bytearray] = field(default_factory=dict)


class MemoryStream:
    """An async read/write view over a file's buffer in a ``MemoryBackend``."""

    def __init__(self, buffer: bytearray):
        self._buffer = buffer
        self._position = 0
        self.closed = False

    async def read(self, size: int = -1) -> bytes:
        end = len(self._buffer) if size < 0 else self._position + size
        chunk = bytes(self._buffer[self._position : end])
        self._position += len(chunk)
        return chunk

    async def write(self, data: bytes) -> int:
        end = self._position + len(data)
        if self._position > len(self._buffer):
            self._buffer.extend(b"\x00" * (self._position - len(self._buffer)))
        self._buffer[self._position : end] = data
        self._position = end
        return len(data)

    async def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_CUR:
            offset += self._position
        elif whence == io.SEEK_END:
            offset += len(self._buffer)
        self._position = max(offset, 0)
        return self._position

    async def truncate(self, size: int | None = None) -> int:
        size = self._position if size is None else size
        del self._buffer[size:]
        return size

    async def close(self) -> None:
        self.closed = True


class MemoryBackend(StorageBackend):
    """Stores folders and files in a dictionary tree."""

    kind = "memory"

    def __init__(self):
        self._root = _Node()

    def _node(self, logical_path: PurePosixPath) -> _Node:
        node = self._root
        for part in logical_path.parts:
            if part not in node.folders:
                raise EntryNotFoundError(f"'{logical_path.as_posix()}' does not exist.")
            node = node.folders[part]
        return node

    def _split_target(
        self, parent: FolderHandle, name: str
    ) -> tuple[_Node, str, PurePosixPath]:
        segments = self.split_name(name)
        if not segments:
            raise StorageBackendError("An entry name is required.")
        target = parent.path.joinpath(*segments)
        return self._node(target.parent), segments[-1], target

    async def get_child_folder(
        self, parent: FolderHandle, name: str
    ) -> FolderHandle | None:
        try:
            node = self._node(parent.path)
        except EntryNotFoundError:
            return None
        if name not in node.folders:
            return None
        return FolderHandle(parent.child_path(name))

    async def get_file(self, parent: FolderHandle, name: str) -> FileHandle | None:
        try:
            node = self._node(parent.path)
        except EntryNotFoundError:
            return None
        if name not in node.files:
            return None
        return FileHandle(parent.child_path(name))

    async def create_file(
        self, parent: FolderHandle, name: str, policy: CollisionPolicy
    ) -> FileHandle:
        node, leaf, target = self._split_target(parent, name)
        if leaf in node.folders:
            raise StorageBackendError(f"'{target.as_posix()}' is a folder.")
        if leaf not in node.files or policy is CollisionPolicy.REPLACE_EXISTING:
            node.files[leaf] = bytearray()
        return FileHandle(target)

    async def create_folder(
        self, parent: FolderHandle, name: str, policy: CollisionPolicy
    ) -> FolderHandle:
        node, leaf, target = self._split_target(parent, name)
        if leaf in node.files:
            raise StorageBackendError(f"'{target.as_posix()}' is a file.")
        if leaf not in node.folders or policy is CollisionPolicy.REPLACE_EXISTING:
            node.folders[leaf] = _Node()
        return FolderHandle(target)

    async def delete_file(self, file: FileHandle) -> None:
        node = self._node(file.path.parent)
        if node.files.pop(file.name, None) is None:
            raise EntryNotFoundError(f"'{file}' does not exist.")

    async def delete_folder(self, folder: FolderHandle) -> None:
        if folder.is_root:
            raise StorageBackendError("The storage root cannot be deleted.")
        node = self._node(folder.path.parent)
        if node.folders.pop(folder.name, None) is None:
            raise EntryNotFoundError(f"'{folder}' does not exist.")

    async def list_files(self, folder: FolderHandle) -> list[FileHandle]:
        node = self._node(folder.path)
        return [FileHandle(folder.child_path(name)) for name in sorted(node.files)]

    async def list_folders(self, folder: FolderHandle) -> list[FolderHandle]:
        node = self._node(folder.path)
        return [FolderHandle(folder.child_path(name)) for name in sorted(node.folders)]

    def _buffer(self, file: FileHandle) -> bytearray:
        node = self._node(file.path.parent)
        if file.name not in node.files:
            raise EntryNotFoundError(f"'{file}' does not exist.")
        return node.files[file.name]

    @asynccontextmanager
    async def open_for_read_write(self, file: FileHandle) -> AsyncIterator[MemoryStream]:
        stream = MemoryStream(self._buffer(file))
        try:
            yield stream
        finally:
            await stream.close()

    async def read_all_bytes(self, file: FileHandle) -> bytes:
        return bytes(self._buffer(file))

    async def write_all_text(
        self, file: FileHandle, text: str, encoding: str = "utf-8"
    ) -> None:
        data = self.encode_text(file, text, encoding)
        buffer = self._buffer(file)
        buffer[:] = data
