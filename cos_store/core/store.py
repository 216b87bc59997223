"""
Tencent COS storage adapter.

Redirects CMS uploads into a COS bucket. Two URL modes exist:

- Public: save() returns an absolute URL on the asset host (CDN, custom
  domain or the bucket's default domain) and browsers fetch from COS.
- Private: with no asset host configured, save() returns a relative URL.
  The CMS routes requests for it to serve(), which proxies the object.

File names are lowercased on upload. serve() recovers objects stored under
mixed-case names by trying a few case variants of the requested key.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from fastapi import Request, Response

from ..config.settings import CosSettings
from ..infrastructure.storage.client import ObjectStorageClient, create_object_client
from .base import RequestHandler, StorageBase
from .exceptions import FetchError, NotFoundError, NotManagedError, ReadError
from .keys import case_variants, join_key, strip_leading_slash, strip_trailing_slash
from .models import ReadOptions, StoredFile, StoredObject

logger = logging.getLogger(__name__)

# 30 days
CACHE_CONTROL = f"max-age={30 * 24 * 60 * 60}"


class COSStore(StorageBase):
    """
    Storage adapter backed by a COS bucket.

    Holds one object storage client for its whole life and shares no
    mutable state between calls, so concurrent requests are safe.
    """

    def __init__(
        self,
        settings: CosSettings,
        client: Optional[ObjectStorageClient] = None,
    ) -> None:
        self.settings = settings
        self._client = client or create_object_client(settings)

        # Presence flags only, never the secrets themselves
        self._trace(
            "Initialized COS store",
            extra={
                "bucket": settings.bucket,
                "region": settings.region,
                "path_prefix": settings.path_prefix,
                "private_storage": settings.private_storage,
                "host": self.host,
                "has_secret_id": bool(settings.secret_id),
                "has_secret_key": bool(settings.secret_key),
            }
        )

    def _trace(self, message: str, extra: Optional[dict] = None) -> None:
        # debug=True lifts this adapter's trace messages to INFO
        level = logging.INFO if self.settings.debug else logging.DEBUG
        logger.log(level, message, extra=extra)

    @property
    def host(self) -> Optional[str]:
        return self.settings.host

    @property
    def path_prefix(self) -> str:
        return self.settings.path_prefix

    def object_key(self, file_name: str, target_dir: Optional[str] = None) -> str:
        """Key for file_name in target_dir, under the configured path prefix."""
        return join_key(self.path_prefix, target_dir or "", file_name)

    def get_sanitized_file_name(self, file_name: str) -> str:
        # Lowercase here too so the uniqueness check sees the key save() writes
        return super().get_sanitized_file_name(file_name).lower()

    @property
    def serve_mount_path(self) -> str:
        """
        Route prefix under which the host mounts serve().

        Relative URLs are /{key} and keys start with the path prefix, so
        mounting here makes every relative URL resolve to serve().
        """
        prefix = strip_trailing_slash(self.path_prefix)
        return f"/{prefix}" if prefix else ""

    def url_for(self, key: str) -> str:
        """URL the CMS stores for an object key."""
        if self.settings.private_storage and not self.host:
            return f"/{key}"
        return f"{self.host}/{key}"

    # -----------------------------------------------------------------------
    # Storage contract
    # -----------------------------------------------------------------------

    async def save(self, file: StoredFile, target_dir: Optional[str] = None) -> str:
        """
        Upload a file and return its URL.

        Name generation and reading the temp file run concurrently; if
        either fails nothing is uploaded.

        Raises:
            ReadError: The temp file could not be read
            UploadError: COS rejected the upload
        """
        directory = self.get_target_dir() if target_dir is None else target_dir

        name_task = asyncio.ensure_future(self.get_unique_file_name(file, directory))
        read_task = asyncio.ensure_future(self._read_file(file.path))
        try:
            file_name, body = await asyncio.gather(name_task, read_task)
        except BaseException:
            # Stop the other half, e.g. exists() checks after a failed read
            for task in (name_task, read_task):
                task.cancel()
            raise

        # The CMS lowercases image URLs before resolving them
        normalized_name = file_name.lower()
        key = self.object_key(normalized_name)

        await self._client.put_object(
            key,
            body,
            content_type=file.type,
            cache_control=CACHE_CONTROL,
        )

        url = self.url_for(key)
        self._trace("Saved file", extra={"key": key, "url": url})
        return url

    async def exists(self, file_name: str, target_dir: str) -> bool:
        key = self.object_key(file_name, target_dir)
        try:
            await self._client.head_object(key)
        except Exception as e:
            self._trace("Object missing", extra={"key": key, "error": str(e)})
            return False
        return True

    async def delete(self, file_name: str, target_dir: Optional[str] = None) -> bool:
        """
        Delete a file. Best effort: False on any failure.

        A missing object and a failed request look the same to the caller.
        """
        if target_dir is None:
            target_dir = self.get_target_dir()
        key = self.object_key(file_name, target_dir)
        try:
            await self._client.delete_object(key)
        except Exception as e:
            self._trace("Delete failed", extra={"key": key, "error": str(e)})
            return False
        return True

    async def read(self, options: Optional[ReadOptions] = None) -> bytes:
        """
        Read a stored file back by the URL save() returned.

        Only absolute URLs on our host are accepted. Without a host
        (private storage, no asset host) every path is refused: those
        files are only reachable through serve().

        Raises:
            NotManagedError: The path is not on this adapter's host
            FetchError: COS could not return the object
        """
        options = options or ReadOptions()
        path = options.path.rstrip("/\\")

        host = self.host
        if not host or not (path == host or path.startswith(host + "/")):
            raise NotManagedError(f"{path} is not stored in COS")

        key = strip_leading_slash(path[len(host):])
        stored = await self._client.get_object(key)
        if stored.body is None:
            raise NotFoundError(f"Object has no body: {key}")
        return stored.body

    def serve(self) -> RequestHandler:
        """
        Build the request handler for files in private storage.

        The handler is bound to this adapter and can be mounted on any
        route; the requested path comes from the route's `path` parameter
        and is appended to the path prefix to form the key.
        """
        async def handler(request: Request) -> Response:
            request_path = request.path_params.get("path")
            if request_path is None:
                request_path = request.url.path

            key = self.serve_key(request_path)
            self._trace(
                "Serving file",
                extra={"request_path": request_path, "key": key}
            )

            try:
                stored = await self._client.get_object(key)
            except FetchError as e:
                self._trace("Direct fetch failed", extra={"key": key, "error": str(e)})
                stored = await self._fetch_case_variant(key, e)

            return self._file_response(stored)

        return handler

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def serve_key(self, request_path: str) -> str:
        if not request_path.startswith("/"):
            request_path = "/" + request_path
        return strip_leading_slash(strip_trailing_slash(self.path_prefix) + request_path)

    async def find_case_variant(self, key: str) -> Optional[str]:
        """First case variant of key that exists in the bucket, if any."""
        for candidate in case_variants(key):
            try:
                await self._client.head_object(candidate)
            except FetchError:
                continue
            self._trace("Found case variant", extra={"key": key, "match": candidate})
            return candidate
        return None

    async def _fetch_case_variant(self, key: str, error: FetchError) -> StoredObject:
        match = await self.find_case_variant(key)
        if match is None:
            logger.info("File not found", extra={"key": key})
            raise NotFoundError(f"File not found: {key}") from error

        try:
            return await self._client.get_object(match)
        except FetchError as e:
            raise NotFoundError(f"File not found: {key}") from e

    def _file_response(self, stored: StoredObject) -> Response:
        if stored.body is None:
            raise NotFoundError(f"File not found: {stored.key}")

        # Upstream headers go out verbatim
        return Response(content=stored.body, headers=stored.headers)

    async def _read_file(self, path: str) -> bytes:
        try:
            return await asyncio.to_thread(Path(path).read_bytes)
        except OSError as e:
            raise ReadError(f"Cannot read upload {path}: {e}") from e


def create_store(config: Optional[Mapping[str, Any]] = None) -> COSStore:
    """
    Create the adapter from a host CMS config object.

    GHOST_STORAGE_ADAPTER_COS_* environment variables override the
    config object's values.
    """
    return COSStore(CosSettings.from_config(config))
