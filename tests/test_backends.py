"""
Unit Tests: backend adapters and their error translation.
"""

from unittest.mock import AsyncMock, patch

import pytest

from localstore.backends import (
    CollisionPolicy,
    LocalDiskBackend,
    MemoryBackend,
    create_backend,
)
from localstore.core.service import LocalStorageService
from localstore.exceptions import (
    EntryNotFoundError,
    InvalidPathError,
    StorageBackendError,
)
from localstore.models.config import StorageConfig
from localstore.models.handles import FileHandle, FolderHandle


class TestLocalDiskBackend:
    def test_creates_root_directory(self, tmp_path):
        LocalDiskBackend(tmp_path / "nested" / "LocalState")

        assert (tmp_path / "nested" / "LocalState").is_dir()

    @pytest.mark.asyncio
    async def test_files_land_under_root(self, disk_backend):
        folder = await disk_backend.create_folder(
            disk_backend.root, "docs", CollisionPolicy.OPEN_IF_EXISTS
        )
        file = await disk_backend.create_file(
            folder, "a.txt", CollisionPolicy.OPEN_IF_EXISTS
        )
        await disk_backend.write_all_text(file, "on disk")

        assert (disk_backend.root_dir / "docs" / "a.txt").read_text() == "on disk"

    @pytest.mark.asyncio
    async def test_permission_error_is_not_absence(self, disk_backend):
        with patch(
            "aiofiles.os.stat",
            new_callable=AsyncMock,
            side_effect=PermissionError(13, "Permission denied"),
        ):
            with pytest.raises(StorageBackendError) as exc_info:
                await disk_backend.get_child_folder(disk_backend.root, "docs")

        assert not isinstance(exc_info.value, EntryNotFoundError)
        assert isinstance(exc_info.value.__cause__, PermissionError)

    @pytest.mark.asyncio
    async def test_missing_parent_is_entry_not_found(self, disk_backend):
        with pytest.raises(EntryNotFoundError):
            await disk_backend.create_file(
                disk_backend.root, "missing/a.txt", CollisionPolicy.OPEN_IF_EXISTS
            )

    @pytest.mark.asyncio
    async def test_invalid_name_is_rejected(self, disk_backend):
        with pytest.raises(InvalidPathError):
            await disk_backend.create_file(
                disk_backend.root, "bad\x00name.txt", CollisionPolicy.OPEN_IF_EXISTS
            )

    @pytest.mark.asyncio
    async def test_nul_byte_lookup_is_absence(self, disk_backend):
        assert await disk_backend.get_child_folder(disk_backend.root, "a\x00b") is None
        assert await disk_backend.get_file(disk_backend.root, "a\x00b") is None

    @pytest.mark.asyncio
    async def test_overlong_name_lookup_is_absence(self, disk_backend):
        overlong = "x" * 300

        assert await disk_backend.get_child_folder(disk_backend.root, overlong) is None
        assert await disk_backend.get_file(disk_backend.root, overlong) is None

    @pytest.mark.asyncio
    async def test_overlong_segment_reads_as_absent(self, disk_backend):
        service = LocalStorageService(disk_backend)
        path = "x" * 300 + "/a.txt"

        assert await service.read_text(path) is None
        assert await service.contains_file(path) is False
        assert await service.contains_directory("x" * 300) is False
        assert await service.list_files("x" * 300) is None

    @pytest.mark.asyncio
    async def test_delete_missing_file(self, disk_backend):
        with pytest.raises(EntryNotFoundError):
            await disk_backend.delete_file(FileHandle(disk_backend.root.child_path("x")))

    @pytest.mark.asyncio
    async def test_root_cannot_be_deleted(self, disk_backend):
        with pytest.raises(StorageBackendError):
            await disk_backend.delete_folder(disk_backend.root)

        assert disk_backend.root_dir.is_dir()

    @pytest.mark.asyncio
    async def test_list_missing_folder(self, disk_backend):
        missing = FolderHandle(disk_backend.root.child_path("gone"))

        with pytest.raises(EntryNotFoundError):
            await disk_backend.list_files(missing)

    @pytest.mark.asyncio
    async def test_read_write_stream(self, disk_backend):
        file = await disk_backend.create_file(
            disk_backend.root, "s.bin", CollisionPolicy.REPLACE_EXISTING
        )
        async with disk_backend.open_for_read_write(file) as stream:
            await stream.write(b"abcdef")
            await stream.seek(0)
            assert await stream.read(3) == b"abc"
            await stream.truncate(4)

        assert await disk_backend.read_all_bytes(file) == b"abcd"


class TestMemoryBackend:
    @pytest.mark.asyncio
    async def test_case_sensitive_lookup(self):
        backend = MemoryBackend()
        await backend.create_folder(backend.root, "Docs", CollisionPolicy.OPEN_IF_EXISTS)

        assert await backend.get_child_folder(backend.root, "Docs") is not None
        assert await backend.get_child_folder(backend.root, "docs") is None

    @pytest.mark.asyncio
    async def test_stream_seek_and_truncate(self):
        backend = MemoryBackend()
        file = await backend.create_file(
            backend.root, "m.bin", CollisionPolicy.OPEN_IF_EXISTS
        )
        async with backend.open_for_read_write(file) as stream:
            await stream.write(b"hello world")
            await stream.seek(-5, 2)
            assert await stream.read() == b"world"
            await stream.seek(5)
            await stream.truncate()

        assert await backend.read_all_bytes(file) == b"hello"

    @pytest.mark.asyncio
    async def test_replace_folder_drops_children(self):
        backend = MemoryBackend()
        docs = await backend.create_folder(
            backend.root, "docs", CollisionPolicy.OPEN_IF_EXISTS
        )
        await backend.create_file(docs, "a.txt", CollisionPolicy.OPEN_IF_EXISTS)

        await backend.create_folder(
            backend.root, "docs", CollisionPolicy.REPLACE_EXISTING
        )

        assert await backend.list_files(docs) == []

    @pytest.mark.asyncio
    async def test_invalid_name_is_rejected(self):
        backend = MemoryBackend()

        with pytest.raises(InvalidPathError):
            await backend.create_folder(
                backend.root, "a\x00b", CollisionPolicy.OPEN_IF_EXISTS
            )


class TestCreateBackend:
    def test_memory(self):
        assert isinstance(create_backend(StorageConfig(backend="memory")), MemoryBackend)

    @pytest.mark.parametrize(
        "kind,folder",
        [("local", "LocalState"), ("roaming", "RoamingState"), ("temporary", "TempState")],
    )
    def test_disk_areas(self, tmp_path, kind, folder):
        backend = create_backend(StorageConfig(backend=kind, data_dir=str(tmp_path)))

        assert isinstance(backend, LocalDiskBackend)
        assert backend.root_dir == tmp_path / folder
        assert backend.root_dir.is_dir()

    def test_default_base(self, tmp_path):
        backend = create_backend(StorageConfig(), default_base=tmp_path)

        assert backend.root_dir == tmp_path / "LocalState"
