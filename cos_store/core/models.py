"""
Value objects passed between the host CMS, the adapter and the client.

Plain dataclasses: no dependency on FastAPI, boto3 or the settings layer.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class StoredFile:
    """
    An upload as handed over by the host CMS.

    The file has already been written to a local temporary path; the
    adapter only reads it.
    """
    name: str  # original file name from the client
    path: str  # local temp file
    type: Optional[str] = None  # declared content type


@dataclass(frozen=True)
class ReadOptions:
    """Arguments to StorageBase.read()."""
    path: str = ""


@dataclass
class StoredObject:
    """An object fetched from the store: body plus response headers."""
    key: str
    body: Optional[bytes]
    headers: dict[str, str] = field(default_factory=dict)
