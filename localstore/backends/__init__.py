"""
Storage Backend Layer.

This package holds the backend capability interface and its concrete adapters:
local disk (for the local, roaming and temporary data areas) and in-memory.
"""

import logging
from pathlib import Path

from localstore.models.config import StorageConfig
from localstore.utils.path import get_data_dir

from .base import CollisionPolicy, StorageBackend
from .local import LocalDiskBackend
from .memory import MemoryBackend

log = logging.getLogger(__name__)


def create_backend(
    config: StorageConfig, default_base: Path | None = None
) -> StorageBackend:
    """
    Builds the backend selected by ``config.backend``.

    Args:
        config: The validated storage configuration.
        default_base: Application data directory used when ``config.data_dir``
            is empty. Defaults to the platform data directory.
    """
    if config.backend == "memory":
        log.debug("Using in-memory storage backend.")
        return MemoryBackend()

    root_dir = config.resolve_root_dir(default_base or get_data_dir())
    log.debug(f"Using {config.backend} storage backend at '{root_dir}'.")
    return LocalDiskBackend(root_dir)


__all__ = [
    "CollisionPolicy",
    "LocalDiskBackend",
    "MemoryBackend",
    "StorageBackend",
    "create_backend",
]
