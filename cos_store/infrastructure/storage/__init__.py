"""
Object storage integration for uploaded assets.

Talks to Tencent COS through its S3-compatible API.
Includes mock mode for local development without credentials.
"""

from .client import (
    COSObjectClient,
    MockObjectClient,
    ObjectStorageClient,
    create_object_client,
)

__all__ = [
    "COSObjectClient",
    "MockObjectClient",
    "ObjectStorageClient",
    "create_object_client",
]
