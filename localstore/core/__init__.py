"""
Core storage engine.

The `LocalStorageService` exposes the file and folder operations. Every
path-based operation first asks the `PathResolver` for the containing folder
and only then acts on the backend.
"""

from .resolver import PathResolver
from .service import LocalStorageService

__all__ = ["LocalStorageService", "PathResolver"]
