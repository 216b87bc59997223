"""
Object storage client for uploaded assets.

Talks to Tencent Cloud Object Storage through its S3-compatible API, so the
SDK is boto3 rather than a COS-specific one. Mock mode keeps objects in
memory, enabling API testing without provisioning a bucket.

Every failure is logged and re-raised as one of our own storage errors,
chained to the SDK error, so callers never need to import botocore.
"""

import asyncio
import hashlib
import logging
from typing import TYPE_CHECKING, Any, Optional, Protocol

from ...core.exceptions import DeleteError, FetchError, NotFoundError, UploadError
from ...core.models import StoredObject

if TYPE_CHECKING:
    from ...config.settings import CosSettings

logger = logging.getLogger(__name__)

# Error codes boto3 reports for a missing key (HEAD has no body, hence "404")
_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NotFound", "404"})


def _error_code(error: Exception) -> str:
    response = getattr(error, "response", None) or {}
    return str(response.get("Error", {}).get("Code", ""))


class ObjectStorageClient(Protocol):
    """
    Protocol for object storage operations.

    Tests provide the in-memory implementation; production uses COS.
    """

    async def put_object(
        self,
        key: str,
        body: bytes,
        content_type: Optional[str] = None,
        cache_control: Optional[str] = None,
    ) -> None:
        """Upload an object."""
        ...

    async def get_object(self, key: str) -> StoredObject:
        """Fetch an object with its body and response headers."""
        ...

    async def head_object(self, key: str) -> dict[str, str]:
        """Fetch only the metadata headers of an object."""
        ...

    async def delete_object(self, key: str) -> None:
        """Delete an object."""
        ...


class COSObjectClient:
    """
    Tencent COS client using boto3.

    The boto3 client is created on first use and then reused for the life
    of the adapter. Creating it lazily keeps adapter construction free of
    side effects even when the configuration is incomplete.

    boto3 is synchronous, so every call runs in a worker thread to keep
    the event loop free while waiting on the network.
    """

    def __init__(self, config: "CosSettings") -> None:
        self._config = config
        self._s3_client: Any = None

    def _trace(self, message: str, extra: Optional[dict] = None) -> None:
        # The adapter's debug flag lifts trace messages to INFO
        level = logging.INFO if self._config.debug else logging.DEBUG
        logger.log(level, message, extra=extra)

    @property
    def s3(self) -> Any:
        """
        The underlying boto3 S3 client.

        We import boto3 here (not at module level) because mock mode
        doesn't need it.
        """
        if self._s3_client is None:
            try:
                import boto3
                from botocore.config import Config
            except ImportError:
                raise ImportError(
                    "boto3 is required for COS storage. Install with: pip install boto3"
                )

            # COS serves buckets on virtual-hosted style URLs
            boto_config = Config(
                signature_version="s3v4",
                s3={"addressing_style": "virtual"},
            )

            self._s3_client = boto3.client(
                "s3",
                endpoint_url=self._config.endpoint,
                aws_access_key_id=self._config.secret_id,
                aws_secret_access_key=self._config.secret_key,
                region_name=self._config.region,
                config=boto_config,
            )

            logger.info(
                "Initialized COS storage client",
                extra={
                    "bucket": self._config.bucket,
                    "endpoint": self._config.endpoint,
                }
            )

        return self._s3_client

    async def put_object(
        self,
        key: str,
        body: bytes,
        content_type: Optional[str] = None,
        cache_control: Optional[str] = None,
    ) -> None:
        params: dict[str, Any] = {
            "Bucket": self._config.bucket,
            "Key": key,
            "Body": body,
        }
        if content_type:
            params["ContentType"] = content_type
        if cache_control:
            params["CacheControl"] = cache_control

        try:
            await asyncio.to_thread(self.s3.put_object, **params)
        except Exception as e:
            logger.error(
                "Failed to upload object",
                extra={"key": key, "error": str(e)}
            )
            raise UploadError(f"Upload failed: {e}") from e

        self._trace(
            "Uploaded object",
            extra={"key": key, "size_bytes": len(body)}
        )

    async def get_object(self, key: str) -> StoredObject:
        try:
            response = await asyncio.to_thread(
                self.s3.get_object,
                Bucket=self._config.bucket,
                Key=key,
            )
            stream = response.get("Body")
            body = await asyncio.to_thread(stream.read) if stream is not None else None
        except Exception as e:
            self._trace(
                "Failed to fetch object",
                extra={"key": key, "error": str(e)}
            )
            if _error_code(e) in _NOT_FOUND_CODES:
                raise NotFoundError(f"Object not found: {key}") from e
            raise FetchError(f"Fetch failed: {e}") from e

        headers = response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
        return StoredObject(key=key, body=body, headers=dict(headers))

    async def head_object(self, key: str) -> dict[str, str]:
        try:
            response = await asyncio.to_thread(
                self.s3.head_object,
                Bucket=self._config.bucket,
                Key=key,
            )
        except Exception as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                raise NotFoundError(f"Object not found: {key}") from e
            raise FetchError(f"Head failed: {e}") from e

        return dict(response.get("ResponseMetadata", {}).get("HTTPHeaders", {}))

    async def delete_object(self, key: str) -> None:
        try:
            await asyncio.to_thread(
                self.s3.delete_object,
                Bucket=self._config.bucket,
                Key=key,
            )
        except Exception as e:
            logger.error(
                "Failed to delete object",
                extra={"key": key, "error": str(e)}
            )
            raise DeleteError(f"Delete failed: {e}") from e

        logger.info("Deleted object", extra={"key": key})


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockObjectClient:
    """
    In-memory object store for local development and tests.

    Keys are case-sensitive like COS. Headers mimic what COS returns so
    serve() behaves the same against either client. Unlike COS, deleting
    a missing key fails, which lets tests see delete() report False.
    """

    def __init__(self) -> None:
        # {key: (body, headers)}
        self._objects: dict[str, tuple[bytes, dict[str, str]]] = {}
        logger.info("Initialized mock storage client (in-memory)")

    @property
    def keys(self) -> list[str]:
        return sorted(self._objects)

    async def put_object(
        self,
        key: str,
        body: bytes,
        content_type: Optional[str] = None,
        cache_control: Optional[str] = None,
    ) -> None:
        headers = {
            "content-type": content_type or "application/octet-stream",
            "content-length": str(len(body)),
            "etag": f'"{hashlib.md5(body).hexdigest()}"',
        }
        if cache_control:
            headers["cache-control"] = cache_control

        self._objects[key] = (body, headers)

        logger.debug(
            "Stored object in mock storage",
            extra={"key": key, "size_bytes": len(body)}
        )

    async def get_object(self, key: str) -> StoredObject:
        if key not in self._objects:
            raise NotFoundError(f"Object not found: {key}")

        body, headers = self._objects[key]
        return StoredObject(key=key, body=body, headers=dict(headers))

    async def head_object(self, key: str) -> dict[str, str]:
        if key not in self._objects:
            raise NotFoundError(f"Object not found: {key}")

        return dict(self._objects[key][1])

    async def delete_object(self, key: str) -> None:
        if key not in self._objects:
            raise DeleteError(f"Object not found: {key}")

        del self._objects[key]
        logger.debug("Deleted object from mock storage", extra={"key": key})


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_object_client(
    config: Optional["CosSettings"] = None,
    mock_mode: bool = False,
) -> ObjectStorageClient:
    """
    Create an object storage client.

    Args:
        config: Adapter settings (required if not mock_mode)
        mock_mode: If True, return the in-memory client

    Returns:
        ObjectStorageClient implementation (COS or Mock)
    """
    if mock_mode or (config is not None and config.mock_mode):
        return MockObjectClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return COSObjectClient(config)
