"""
Shared fixtures: a storage service over each backend kind.
"""

import pytest

from localstore.backends import LocalDiskBackend, MemoryBackend
from localstore.core.service import LocalStorageService


@pytest.fixture(params=["memory", "disk"])
def backend(request, tmp_path):
    if request.param == "memory":
        return MemoryBackend()
    return LocalDiskBackend(tmp_path / "LocalState")


@pytest.fixture
def service(backend):
    return LocalStorageService(backend)


@pytest.fixture
def disk_backend(tmp_path):
    return LocalDiskBackend(tmp_path / "LocalState")


async def make_folders(service: LocalStorageService, *paths: str) -> None:
    """Creates each folder path level by level."""
    for path in paths:
        parts = [p for p in path.replace("\\", "/").split("/") if p]
        for depth in range(1, len(parts) + 1):
            folder = await service.create_or_get_folder("/".join(parts[:depth]))
            assert folder is not None
