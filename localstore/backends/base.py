"""
The capability set every storage backend provides to the storage service.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from enum import Enum
from typing import Protocol

from localstore.exceptions import StorageBackendError
from localstore.models.handles import FileHandle, FolderHandle
from localstore.utils.path import split_logical_path, to_posix, validate_segment


class CollisionPolicy(Enum):
    """Behavior when creating a file or folder that already exists."""

    OPEN_IF_EXISTS = "open_if_exists"
    REPLACE_EXISTING = "replace_existing"


class AsyncBinaryStream(Protocol):
    """The read/write stream returned by ``open_for_read_write``."""

    async def read(self, size: int = -1) -> bytes: ...

    async def write(self, data: bytes) -> int: ...

    async def seek(self, offset: int, whence: int = 0) -> int: ...

    async def truncate(self, size: int | None = None) -> int: ...


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    Methods that look up a single entry return None when it is absent. Every
    other failure is raised as ``StorageBackendError``; operations that act on
    an entry that does not exist raise ``EntryNotFoundError``.
    """

    kind = "abstract"

    @property
    def root(self) -> FolderHandle:
        """The handle of the top-level folder all paths are relative to."""
        return FolderHandle(to_posix([]))

    @abstractmethod
    async def get_child_folder(
        self, parent: FolderHandle, name: str
    ) -> FolderHandle | None:
        """Returns the direct child folder called ``name``, or None if absent."""

    @abstractmethod
    async def get_file(self, parent: FolderHandle, name: str) -> FileHandle | None:
        """Returns the direct child file called ``name``, or None if absent."""

    @abstractmethod
    async def create_file(
        self, parent: FolderHandle, name: str, policy: CollisionPolicy
    ) -> FileHandle:
        """
        Creates a file below ``parent``. ``name`` may be a nested relative path
        whose intermediate folders must already exist.

        Raises:
            EntryNotFoundError: If an intermediate folder is missing.
            StorageBackendError: For any other failure.
        """

    @abstractmethod
    async def create_folder(
        self, parent: FolderHandle, name: str, policy: CollisionPolicy
    ) -> FolderHandle:
        """Creates a folder below ``parent``, with the same naming rules as files."""

    @abstractmethod
    async def delete_file(self, file: FileHandle) -> None:
        pass

    @abstractmethod
    async def delete_folder(self, folder: FolderHandle) -> None:
        """Deletes a folder and everything below it."""

    @abstractmethod
    async def list_files(self, folder: FolderHandle) -> list[FileHandle]:
        """Returns a snapshot of the immediate child files, sorted by name."""

    @abstractmethod
    async def list_folders(self, folder: FolderHandle) -> list[FolderHandle]:
        """Returns a snapshot of the immediate child folders, sorted by name."""

    @abstractmethod
    def open_for_read_write(
        self, file: FileHandle
    ) -> AbstractAsyncContextManager[AsyncBinaryStream]:
        """Opens an existing file for reading and writing, positioned at 0."""

    @abstractmethod
    async def read_all_bytes(self, file: FileHandle) -> bytes:
        pass

    async def read_all_text(self, file: FileHandle, encoding: str = "utf-8") -> str:
        """Reads and decodes the full contents of a file."""
        data = await self.read_all_bytes(file)
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as e:
            raise StorageBackendError(
                f"File '{file}' is not valid {encoding} text."
            ) from e

    @abstractmethod
    async def write_all_text(
        self, file: FileHandle, text: str, encoding: str = "utf-8"
    ) -> None:
        """Replaces the full contents of a file with the encoded ``text``."""

    @staticmethod
    def split_name(name: str) -> list[str]:
        """Splits a possibly nested entry name and validates each segment."""
        segments = split_logical_path(name)
        for segment in segments:
            validate_segment(segment)
        return segments

    @staticmethod
    def encode_text(file: FileHandle, text: str, encoding: str) -> bytes:
        """Encodes a whole text buffer before any byte reaches the file."""
        try:
            return text.encode(encoding)
        except UnicodeEncodeError as e:
            raise StorageBackendError(
                f"Text for '{file}' cannot be encoded as {encoding}."
            ) from e
