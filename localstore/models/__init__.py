"""
Data Models Layer.

This package contains the handle, payload and configuration models used
throughout the library.
"""

from .config import StorageConfig
from .handles import FileHandle, FolderHandle
from .payload import PayloadKind, PixelBuffer

__all__ = ["FileHandle", "FolderHandle", "PayloadKind", "PixelBuffer", "StorageConfig"]
