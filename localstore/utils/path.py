"""
Utilities for splitting logical paths and locating the application data areas.
"""

import os
import re
from pathlib import Path, PurePosixPath

from pathvalidate import ValidationError, validate_filename

from localstore.exceptions import InvalidPathError

_SEPARATORS = re.compile(r"[\\/]")


def split_logical_path(path: str) -> list[str]:
    """
    Splits a logical path on both '/' and '\\', discarding empty segments.

    Raises:
        InvalidPathError: If a segment is '.' or '..'.
    """
    segments = [segment for segment in _SEPARATORS.split(path) if segment]
    for segment in segments:
        if segment in (".", ".."):
            raise InvalidPathError(
                f"Relative segment '{segment}' is not allowed in '{path}'."
            )
    return segments


def split_file_path(path: str) -> tuple[list[str], str]:
    """
    Splits a logical file path into its folder segments and its file name.
    The file name is empty when the path has no segments at all.
    """
    segments = split_logical_path(path)
    if not segments:
        return [], ""
    return segments[:-1], segments[-1]


def to_posix(segments: list[str]) -> PurePosixPath:
    """Joins segments into the canonical logical path used by handles."""
    return PurePosixPath(*segments)


def validate_segment(name: str) -> None:
    """
    Checks that a single segment can name a file or folder on this host.

    Raises:
        InvalidPathError: If the name is rejected.
    """
    try:
        validate_filename(name, platform="auto")
    except ValidationError as e:
        raise InvalidPathError(f"Invalid entry name '{name}': {e}") from e


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "localstore"


def get_data_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("LOCALAPPDATA", "~\\AppData\\Local"))
    else:
        base_dir = Path(os.getenv("XDG_DATA_HOME", "~/.local/share"))
    return base_dir.expanduser() / "localstore"
