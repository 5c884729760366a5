"""
Immutable handles to resolved folders and files.

A handle is a lookup result: it records where an entry lives relative to the
storage root and is interpreted by the backend that produced it.
"""

from dataclasses import dataclass
from pathlib import PurePosixPath


@dataclass(frozen=True)
class FolderHandle:
    """A resolved reference to a folder below (or equal to) the storage root."""

    path: PurePosixPath

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_root(self) -> bool:
        return not self.path.parts

    def child_path(self, name: str) -> PurePosixPath:
        """Returns the logical path of a direct child of this folder."""
        return self.path / name

    def __str__(self) -> str:
        return self.path.as_posix() if self.path.parts else "/"


@dataclass(frozen=True)
class FileHandle:
    """A resolved reference to a single file inside a folder."""

    path: PurePosixPath

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def parent(self) -> FolderHandle:
        return FolderHandle(self.path.parent)

    def __str__(self) -> str:
        return self.path.as_posix()
