"""
Resolves logical paths into folder handles by walking the folder tree from the root.
"""

import logging

from localstore.backends.base import StorageBackend
from localstore.models.handles import FolderHandle
from localstore.utils.path import split_file_path, split_logical_path
from localstore.utils.structured_logger import StorageEventLogger

log = logging.getLogger(__name__)


class PathResolver:
    """Walks logical paths one segment at a time against a storage backend."""

    def __init__(
        self, backend: StorageBackend, events: StorageEventLogger | None = None
    ):
        self.backend = backend
        self._events = events

    async def resolve_folder(
        self, path: str, is_directory_path: bool = False
    ) -> FolderHandle | None:
        """
        Resolves the folder named by ``path``.

        Args:
            path: A logical path using '/' or '\\' separators.
            is_directory_path: Whether the whole path names a folder (True) or
                its last segment is a file name that is not resolved (False).

        Returns:
            The resolved folder, or None as soon as a segment does not exist.

        Raises:
            InvalidPathError: If the path contains '.' or '..' segments.
            StorageBackendError: If the backend fails for any other reason.
        """
        if is_directory_path:
            segments = split_logical_path(path)
        else:
            segments, _ = split_file_path(path)

        current = self.backend.root
        for name in segments:
            child = await self.backend.get_child_folder(current, name)
            if child is None:
                log.debug(f"Folder '{name}' of '{path}' not found under '{current}'.")
                if self._events:
                    self._events.folder_missing(path, name)
                return None
            current = child
        return current
