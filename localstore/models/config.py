"""
Pydantic model for the storage configuration.
Provides validation for all settings read from the INI file or the command line.
"""

import codecs
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

BACKEND_KINDS = ("local", "roaming", "temporary", "memory")

# Application-data areas, one per disk-backed kind
BACKEND_FOLDERS = {
    "local": "LocalState",
    "roaming": "RoamingState",
    "temporary": "TempState",
}

DEFAULT_CHUNK_SIZE = 1024
MAX_CHUNK_SIZE = 16 * 1024 * 1024


class StorageConfig(BaseModel):
    """A validated configuration model for a storage service instance."""

    backend: str = "local"
    data_dir: str = ""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    encoding: str = "utf-8"
    log_json: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Ensures the backend is one of the known kinds."""
        v = v.lower()
        if v not in BACKEND_KINDS:
            raise ValueError(f"Backend must be one of: {', '.join(BACKEND_KINDS)}.")
        return v

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        """Ensures a usable copy chunk size."""
        if v < 1 or v > MAX_CHUNK_SIZE:
            raise ValueError(f"Chunk size must be between 1 and {MAX_CHUNK_SIZE}.")
        return v

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Ensures the text encoding is a codec Python knows."""
        try:
            return codecs.lookup(v).name
        except LookupError as e:
            raise ValueError(f"Unknown text encoding: {v}") from e

    def resolve_root_dir(self, default_base: Path) -> Path:
        """
        Returns the directory backing the configured disk backend.

        ``data_dir`` overrides ``default_base``; the backend kind selects the
        application-data area inside it.
        """
        base = Path(self.data_dir).expanduser() if self.data_dir else default_base
        return base / BACKEND_FOLDERS.get(self.backend, BACKEND_FOLDERS["local"])

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
