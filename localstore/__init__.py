"""
localstore: hierarchical, path-addressed asynchronous storage over an
application-local storage root.
"""

__version__ = "0.3.0"

from localstore.backends import LocalDiskBackend, MemoryBackend, create_backend
from localstore.core.service import LocalStorageService
from localstore.models.handles import FileHandle, FolderHandle
from localstore.models.payload import PayloadKind, PixelBuffer

__all__ = [
    "FileHandle",
    "FolderHandle",
    "LocalDiskBackend",
    "LocalStorageService",
    "MemoryBackend",
    "PayloadKind",
    "PixelBuffer",
    "__version__",
    "create_backend",
]
