"""
Image upload and delete endpoints.

These stand in for the CMS's own upload pipeline: the upload is spooled
to a temp file, handed to the adapter as a StoredFile, and the URL the
adapter returns goes back to the client. Reading files back happens
either directly on the asset host (public buckets) or through the
serve() route that create_app() mounts (private buckets).
"""

import logging
import os
import tempfile
from typing import Annotated, Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status
from pydantic import BaseModel, Field

from ...core.models import StoredFile
from ..dependencies import AuthenticatedUser, SettingsDep, StoreDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class ImageUploadResponse(BaseModel):
    """Response after storing an image."""
    url: str = Field(description="URL to reference the image by (relative in private mode)")


class ImageDeleteResponse(BaseModel):
    """Response after a delete attempt."""
    deleted: bool = Field(description="Whether COS confirmed the delete")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an image",
    description="Store an image in COS and return the URL to reference it by",
)
async def upload_image(
    image: Annotated[UploadFile, File(description="Image file")],
    api_key: AuthenticatedUser,
    store: StoreDep,
    settings: SettingsDep,
    target_dir: Annotated[Optional[str], Query(description="Directory under the path prefix")] = None,
) -> ImageUploadResponse:
    """
    Upload an image.

    Defaults to a YYYY/MM directory under the configured path prefix.
    """
    data = await image.read()

    max_size_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(data) > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image too large. Maximum size: {settings.max_upload_size_mb}MB"
        )

    file_name = image.filename or "upload"
    _, ext = os.path.splitext(file_name)

    with tempfile.NamedTemporaryFile(suffix=ext, delete=False) as tmp:
        tmp.write(data)
        tmp_path = tmp.name

    try:
        url = await store.save(
            StoredFile(name=file_name, path=tmp_path, type=image.content_type),
            target_dir,
        )
    finally:
        os.unlink(tmp_path)

    logger.info(
        "Image uploaded",
        extra={
            "image_filename": file_name,
            "size_bytes": len(data),
            "url": url,
        }
    )

    return ImageUploadResponse(url=url)


@router.delete(
    "/{path:path}",
    response_model=ImageDeleteResponse,
    summary="Delete an image",
    description="Delete an image by its path under the path prefix (e.g. 2024/05/photo.jpg)",
)
async def delete_image(
    path: str,
    api_key: AuthenticatedUser,
    store: StoreDep,
) -> ImageDeleteResponse:
    """
    Delete an image. Best effort: a missing file reports deleted=false.
    """
    target_dir, _, file_name = path.strip("/").rpartition("/")
    if not file_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File name required",
        )

    deleted = await store.delete(file_name, target_dir)

    logger.info("Image delete", extra={"path": path, "deleted": deleted})

    return ImageDeleteResponse(deleted=deleted)
