"""
Core adapter logic - framework-agnostic where it can be.

- base: The storage contract the host CMS expects from any adapter
- store: The COS adapter implementing that contract (import from
  cos_store.core.store; it depends on the infrastructure layer)
- keys: Object key construction and case-variant recovery
"""

from .base import StorageBase
from .exceptions import (
    ConfigError,
    DeleteError,
    FetchError,
    NotFoundError,
    NotManagedError,
    ReadError,
    StorageError,
    UploadError,
)
from .models import ReadOptions, StoredFile, StoredObject

__all__ = [
    "ConfigError",
    "DeleteError",
    "FetchError",
    "NotFoundError",
    "NotManagedError",
    "ReadError",
    "ReadOptions",
    "StorageBase",
    "StorageError",
    "StoredFile",
    "StoredObject",
    "UploadError",
]
