"""
The storage service: file and folder operations over a single storage root.

Absence is always reported as a value (None, False or a silent no-op). Backend
failures other than absence propagate as `StorageBackendError`, except for the
create/replace operations, which report them as None.
"""

import asyncio
import inspect
import io
import logging
from pathlib import Path
from typing import Any, BinaryIO

from localstore.backends import create_backend
from localstore.backends.base import AsyncBinaryStream, CollisionPolicy, StorageBackend
from localstore.exceptions import EntryNotFoundError, InvalidPathError, LocalStoreError
from localstore.models.config import DEFAULT_CHUNK_SIZE, StorageConfig
from localstore.models.handles import FileHandle, FolderHandle
from localstore.models.payload import PayloadKind, PixelBuffer
from localstore.utils.path import split_file_path
from localstore.utils.structured_logger import StorageEventLogger

from .resolver import PathResolver

log = logging.getLogger(__name__)

FileTarget = str | FileHandle
ByteSource = BinaryIO | Any
PixelSource = PixelBuffer | bytes | bytearray | memoryview


async def _read_chunk(source: ByteSource, size: int) -> bytes:
    """Reads one chunk from a sync or async binary source without blocking the loop."""
    if inspect.iscoroutinefunction(source.read):
        return await source.read(size)
    if isinstance(source, io.BytesIO):
        return source.read(size)
    return await asyncio.to_thread(source.read, size)


async def _close_source(source: ByteSource) -> None:
    close = getattr(source, "close", None)
    if close is None:
        return
    result = close()
    if inspect.isawaitable(result):
        await result


class LocalStorageService:
    """
    Hierarchical, path-addressed storage over one backend root.

    One instance owns one root; it holds no mutable state after construction
    and can be shared by concurrent tasks. Nothing serializes concurrent
    writers to the same path.
    """

    def __init__(
        self,
        backend: StorageBackend,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        encoding: str = "utf-8",
        events: StorageEventLogger | None = None,
    ):
        """
        Initializes the service.

        Args:
            backend: The storage backend providing the root folder.
            chunk_size: Block size used when copying byte streams.
            encoding: Text encoding for `write_text` and `read_text`.
            events: Optional structured logger for mutation events.
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive.")
        self._backend = backend
        self._resolver = PathResolver(backend, events)
        self._events = events
        self.chunk_size = chunk_size
        self.encoding = encoding

    @classmethod
    def from_config(
        cls,
        config: StorageConfig,
        events: StorageEventLogger | None = None,
        default_base: Path | None = None,
    ) -> "LocalStorageService":
        """Builds a service and its backend from a validated configuration."""
        return cls(
            create_backend(config, default_base),
            chunk_size=config.chunk_size,
            encoding=config.encoding,
            events=events,
        )

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def root(self) -> FolderHandle:
        return self._backend.root

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    # --- File operations ---

    async def _open_target(
        self, target: FileTarget, policy: CollisionPolicy
    ) -> FileHandle | None:
        """Resolves the folder of ``target`` and creates or opens the file in it."""
        if isinstance(target, FileHandle):
            return target
        _, name = split_file_path(target)
        if not name:
            return None
        folder = await self._resolver.resolve_folder(target)
        if folder is None:
            return None
        try:
            return await self._backend.create_file(folder, name, policy)
        except InvalidPathError as e:
            log.debug(f"Cannot create file '{target}': {e}")
            return None
        except EntryNotFoundError:
            return None

    async def _existing_file(self, target: FileTarget) -> FileHandle | None:
        if isinstance(target, FileHandle):
            return target
        _, name = split_file_path(target)
        if not name:
            return None
        folder = await self._resolver.resolve_folder(target)
        if folder is None:
            return None
        return await self._backend.get_file(folder, name)

    def _file_written(self, file: FileHandle, kind: PayloadKind, size: int) -> None:
        log.debug(f"Wrote {size} units ({kind.value}) to '{file}'.")
        if self._events:
            self._events.file_written(str(file), kind.value, size)

    async def write_text(self, target: FileTarget, text: str) -> bool:
        """
        Replaces the contents of a file with ``text``, creating the file if needed.

        Returns:
            False if the containing folder does not exist, True otherwise.
        """
        file = await self._open_target(target, CollisionPolicy.OPEN_IF_EXISTS)
        if file is None:
            return False
        try:
            await self._backend.write_all_text(file, text, self.encoding)
        except EntryNotFoundError:
            return False
        self._file_written(file, PayloadKind.TEXT, len(text))
        return True

    async def write_bytes(self, target: FileTarget, stream: ByteSource) -> bool:
        """
        Copies a binary stream into a file in `chunk_size` blocks.

        The copy ends only when a read returns an empty chunk, so payloads
        whose length is an exact multiple of the chunk size are copied whole.
        Any bytes the file held beyond the copied length are truncated. The
        source stream is closed on every exit path.

        Args:
            target: A logical file path or a resolved file handle.
            stream: A sync binary file object or an object with an async `read`.

        Returns:
            False if the containing folder does not exist, True otherwise.
        """
        try:
            file = await self._open_target(target, CollisionPolicy.OPEN_IF_EXISTS)
            if file is None:
                return False
            try:
                async with self._backend.open_for_read_write(file) as sink:
                    await sink.seek(0)
                    written = await self._copy_stream(stream, sink)
                    await sink.truncate(written)
            except EntryNotFoundError:
                return False
        finally:
            await _close_source(stream)
        self._file_written(file, PayloadKind.BYTE_STREAM, written)
        return True

    async def _copy_stream(self, source: ByteSource, sink: AsyncBinaryStream) -> int:
        written = 0
        while True:
            chunk = await _read_chunk(source, self.chunk_size)
            if not chunk:
                break
            await sink.write(chunk)
            written += len(chunk)
        return written

    async def write_image(self, target: FileTarget, pixels: PixelSource) -> bool:
        """
        Writes a raw pixel buffer as one opaque blob into a freshly replaced file.

        Returns:
            False if the containing folder does not exist, True otherwise.
        """
        data = pixels.data if isinstance(pixels, PixelBuffer) else bytes(pixels)
        file = await self._open_target(target, CollisionPolicy.REPLACE_EXISTING)
        if file is None:
            return False
        try:
            async with self._backend.open_for_read_write(file) as sink:
                await sink.seek(0)
                await sink.write(data)
                await sink.truncate(len(data))
        except EntryNotFoundError:
            return False
        self._file_written(file, PayloadKind.PIXEL_BUFFER, len(data))
        return True

    async def read_text(self, target: FileTarget) -> str | None:
        """Returns the decoded contents of a file, or None if it does not exist."""
        file = await self._existing_file(target)
        if file is None:
            return None
        try:
            return await self._backend.read_all_text(file, self.encoding)
        except EntryNotFoundError:
            return None

    async def read_bytes(self, target: FileTarget) -> bytes | None:
        """Returns the raw contents of a file, or None if it does not exist."""
        file = await self._existing_file(target)
        if file is None:
            return None
        try:
            return await self._backend.read_all_bytes(file)
        except EntryNotFoundError:
            return None

    async def contains_file(self, path: str) -> bool:
        return await self._existing_file(path) is not None

    async def get_file(self, path: str) -> FileHandle | None:
        """Returns the handle of an existing file, or None."""
        return await self._existing_file(path)

    async def _create_file(self, path: str, policy: CollisionPolicy) -> FileHandle | None:
        try:
            return await self._backend.create_file(self.root, path, policy)
        except LocalStoreError as e:
            log.warning(f"Could not create file '{path}': {e}")
            if self._events:
                self._events.create_failed(path, str(e))
            return None

    async def create_or_get_file(self, path: str) -> FileHandle | None:
        """Creates the file at ``path`` or opens it if it exists. None on failure."""
        return await self._create_file(path, CollisionPolicy.OPEN_IF_EXISTS)

    async def create_or_replace_file(self, path: str) -> FileHandle | None:
        """Creates an empty file at ``path``, discarding an existing one. None on failure."""
        return await self._create_file(path, CollisionPolicy.REPLACE_EXISTING)

    async def delete_file(self, path: str) -> None:
        """Deletes a file. Missing folders or files are not an error."""
        file = await self._existing_file(path)
        if file is None:
            return
        try:
            await self._backend.delete_file(file)
        except EntryNotFoundError:
            return
        log.debug(f"Deleted file '{file}'.")
        if self._events:
            self._events.file_deleted(str(file))

    # --- Folder operations ---

    async def contains_directory(self, path: str) -> bool:
        folder = await self._resolver.resolve_folder(path, is_directory_path=True)
        return folder is not None

    async def get_folder(self, path: str) -> FolderHandle | None:
        """Returns the handle of an existing folder, or None."""
        return await self._resolver.resolve_folder(path, is_directory_path=True)

    async def list_files(self, path: str = "") -> list[FileHandle] | None:
        """
        Lists the immediate child files of a folder.

        Returns:
            A snapshot list sorted by name, or None if the folder does not exist.
        """
        folder = await self.get_folder(path)
        if folder is None:
            return None
        try:
            return await self._backend.list_files(folder)
        except EntryNotFoundError:
            return None

    async def list_folders(self, path: str = "") -> list[FolderHandle] | None:
        """
        Lists the immediate child folders of a folder.

        Returns:
            A snapshot list sorted by name, or None if the folder does not exist.
        """
        folder = await self.get_folder(path)
        if folder is None:
            return None
        try:
            return await self._backend.list_folders(folder)
        except EntryNotFoundError:
            return None

    async def _create_folder(
        self, path: str, policy: CollisionPolicy
    ) -> FolderHandle | None:
        try:
            folder = await self._backend.create_folder(self.root, path, policy)
        except LocalStoreError as e:
            log.warning(f"Could not create folder '{path}': {e}")
            if self._events:
                self._events.create_failed(path, str(e))
            return None
        if self._events:
            self._events.folder_created(
                str(folder), policy is CollisionPolicy.REPLACE_EXISTING
            )
        return folder

    async def create_or_get_folder(self, path: str) -> FolderHandle | None:
        return await self._create_folder(path, CollisionPolicy.OPEN_IF_EXISTS)

    async def create_or_replace_folder(self, path: str) -> FolderHandle | None:
        """Creates an empty folder at ``path``, deleting an existing one first."""
        return await self._create_folder(path, CollisionPolicy.REPLACE_EXISTING)

    async def delete_folder(self, path: str) -> None:
        """Recursively deletes a folder. A missing folder is not an error."""
        folder = await self.get_folder(path)
        if folder is None:
            return
        if folder.is_root:
            log.warning("Refusing to delete the storage root.")
            return
        try:
            await self._backend.delete_folder(folder)
        except EntryNotFoundError:
            return
        log.debug(f"Deleted folder '{folder}'.")
        if self._events:
            self._events.folder_deleted(str(folder))
