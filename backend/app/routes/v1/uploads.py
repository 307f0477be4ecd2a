# backend/app/routes/v1/uploads.py
"""
Upload routes - API v1

Instructor photos go straight from the client to Uploadthing; this API only
hands out the presigned target and records the result.

Endpoints:
    POST /instructor-photo           → Presigned upload target
    POST /instructor-photo/confirm   → Attach the uploaded file to the profile
"""

import logging

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import get_current_instructor
from ...api.dependencies.services import get_upload_service
from ...models.instructor import Instructor
from ...schemas.upload import (
    PhotoConfirmRequest,
    PhotoConfirmResponse,
    PhotoUploadRequest,
    PhotoUploadResponse,
)
from ...services.upload_service import UploadService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["uploads-v1"])


@router.post("/instructor-photo", response_model=PhotoUploadResponse)
def request_instructor_photo_upload(
    payload: PhotoUploadRequest,
    instructor: Instructor = Depends(get_current_instructor),
    upload_service: UploadService = Depends(get_upload_service),
) -> PhotoUploadResponse:
    target = upload_service.request_photo_upload(
        instructor, payload.filename, payload.content_type, payload.size_bytes
    )
    return PhotoUploadResponse(**target)


@router.post("/instructor-photo/confirm", response_model=PhotoConfirmResponse)
def confirm_instructor_photo(
    payload: PhotoConfirmRequest,
    instructor: Instructor = Depends(get_current_instructor),
    upload_service: UploadService = Depends(get_upload_service),
) -> PhotoConfirmResponse:
    updated = upload_service.confirm_photo(instructor, payload.file_key)
    return PhotoConfirmResponse(photo_url=updated.photo_url)
