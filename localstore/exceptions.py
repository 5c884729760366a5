"""
Defines custom exceptions for the storage library to allow for more specific error
handling.
"""


class LocalStoreError(Exception):
    """Base exception for all library-specific errors."""


class StorageBackendError(LocalStoreError):
    """
    Raised when the storage backend fails with a platform-level I/O error.

    The originating exception, when there is one, is chained as ``__cause__``.
    """


class EntryNotFoundError(StorageBackendError):
    """
    Raised by a backend when a file or folder does not exist.

    Never escapes a public storage operation; the service turns it into an
    absent value.
    """


class InvalidPathError(LocalStoreError):
    """Raised when a logical path contains a segment that cannot name an entry."""


class ConfigurationError(LocalStoreError):
    """Raised for issues related to configuration loading or validation."""
