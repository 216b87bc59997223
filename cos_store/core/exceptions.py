"""
Errors raised by the storage adapter.

Everything derives from StorageError so the host application can map the
whole family to HTTP responses in one place.
"""


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


class ConfigError(StorageError):
    """Required adapter configuration is missing."""
    pass


class ReadError(StorageError):
    """The local temporary upload file could not be read."""
    pass


class UploadError(StorageError):
    """The object store rejected or failed an upload."""
    pass


class FetchError(StorageError):
    """Fetching an object (or its metadata) from the store failed."""
    pass


class NotFoundError(FetchError):
    """The object does not exist, after any fallback lookups."""
    pass


class DeleteError(StorageError):
    """Deleting an object failed."""
    pass


class NotManagedError(StorageError):
    """A path was handed to read() that this adapter does not own."""
    pass
