"""Strict schemas for upload endpoints."""

from typing import Any, Dict, Optional

from pydantic import Field

from ..core.constants import ALLOWED_IMAGE_CONTENT_TYPES
from .base import StrictModel, StrictRequestModel


class PhotoUploadRequest(StrictRequestModel):
    """Metadata of the image the browser is about to upload."""

    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., description=", ".join(ALLOWED_IMAGE_CONTENT_TYPES))
    size_bytes: int = Field(..., gt=0)


class PhotoUploadResponse(StrictModel):
    """Presigned upload target returned by Uploadthing."""

    upload_url: str
    fields: Dict[str, Any] = Field(default_factory=dict)
    file_key: str
    file_url: str


class PhotoConfirmRequest(StrictRequestModel):
    file_key: str = Field(..., min_length=1, max_length=255, pattern=r"^[A-Za-z0-9._-]+$")


class PhotoConfirmResponse(StrictModel):
    photo_url: Optional[str] = None


__all__ = [
    "PhotoConfirmRequest",
    "PhotoConfirmResponse",
    "PhotoUploadRequest",
    "PhotoUploadResponse",
]
