# backend/app/services/upload_service.py
"""
Upload Service for the Sideout Platform

Instructor photos go straight from the browser to Uploadthing. This service
validates the file metadata, asks Uploadthing for a presigned target, and
records the file key on the instructor profile once the browser confirms the
upload.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import ALLOWED_IMAGE_CONTENT_TYPES, UPLOADTHING_FILE_URL_BASE
from ..core.exceptions import ExternalServiceException, ServiceException, ValidationException
from ..integrations.uploadthing_client import UploadthingClient, UploadthingError
from ..models.instructor import Instructor
from .base import BaseService

logger = logging.getLogger(__name__)


def file_url_for_key(file_key: str) -> str:
    return f"{UPLOADTHING_FILE_URL_BASE}/{file_key}"


class UploadService(BaseService):
    """Presigned uploads for instructor photos."""

    def __init__(self, db: Session, client: Optional[UploadthingClient] = None):
        super().__init__(db)
        self._client = client

    @property
    def client(self) -> UploadthingClient:
        if self._client is None:
            if not settings.uploadthing_token:
                raise ServiceException(
                    "File uploads are not configured", code="UPLOADS_NOT_CONFIGURED"
                )
            self._client = UploadthingClient(
                api_key=settings.uploadthing_token,
                base_url=settings.uploadthing_api_base,
            )
        return self._client

    @staticmethod
    def validate_image(content_type: str, size_bytes: int) -> None:
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise ValidationException(
                "Photos must be JPEG, PNG or WebP images",
                code="UNSUPPORTED_CONTENT_TYPE",
                details={"content_type": content_type},
            )
        if size_bytes > settings.upload_max_bytes:
            raise ValidationException(
                "Photo is too large",
                code="FILE_TOO_LARGE",
                details={"size_bytes": size_bytes, "max_bytes": settings.upload_max_bytes},
            )

    @BaseService.measure_operation("request_photo_upload")
    def request_photo_upload(
        self, instructor: Instructor, filename: str, content_type: str, size_bytes: int
    ) -> Dict[str, Any]:
        """
        Get a presigned upload target for an instructor photo.

        Returns:
            Dict with upload_url, fields, file_key and file_url

        Raises:
            ValidationException: Unsupported type or oversized file
            ServiceException: Uploads not configured or Uploadthing failed
        """
        self.validate_image(content_type, size_bytes)
        try:
            target = self.client.prepare_upload(
                name=filename, size=size_bytes, content_type=content_type
            )
        except UploadthingError as e:
            self.logger.error(f"Uploadthing rejected photo upload for {instructor.id}: {e}")
            raise ExternalServiceException("Could not start the upload", code="UPLOAD_FAILED")

        file_key = target["key"]
        self.log_operation("request_photo_upload", instructor_id=instructor.id, file_key=file_key)
        return {
            "upload_url": target["url"],
            "fields": target.get("fields") or {},
            "file_key": file_key,
            "file_url": target.get("fileUrl") or file_url_for_key(file_key),
        }

    @BaseService.measure_operation("confirm_photo_upload")
    def confirm_photo(self, instructor: Instructor, file_key: str) -> Instructor:
        """Point the instructor profile at an uploaded photo."""
        previous_key = instructor.photo_key
        with self.transaction():
            instructor.photo_key = file_key
            instructor.photo_url = file_url_for_key(file_key)
            self.db.flush()

        if previous_key and previous_key != file_key and settings.uploadthing_token:
            try:
                self.client.delete_files([previous_key])
            except UploadthingError as e:
                self.logger.warning(f"Failed to delete replaced photo {previous_key}: {e}")
        return instructor
