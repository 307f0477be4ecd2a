from unittest.mock import MagicMock

import pytest

from app.core.exceptions import ServiceException, ValidationException
from app.integrations.uploadthing_client import UploadthingClient, UploadthingError
from app.services.upload_service import UploadService


@pytest.fixture
def uploadthing():
    client = MagicMock(spec=UploadthingClient)
    client.prepare_upload.return_value = {
        "key": "photo123",
        "url": "https://sea1.ingest.uploadthing.com/photo123",
        "fields": {"policy": "p"},
    }
    return client


def test_request_photo_upload(db, test_instructor, uploadthing):
    result = UploadService(db, client=uploadthing).request_photo_upload(
        test_instructor, "me.jpg", "image/jpeg", 2048
    )

    uploadthing.prepare_upload.assert_called_once_with(
        name="me.jpg", size=2048, content_type="image/jpeg"
    )
    assert result == {
        "upload_url": "https://sea1.ingest.uploadthing.com/photo123",
        "fields": {"policy": "p"},
        "file_key": "photo123",
        "file_url": "https://utfs.io/f/photo123",
    }


def test_rejects_unsupported_type(db, test_instructor, uploadthing):
    with pytest.raises(ValidationException) as exc:
        UploadService(db, client=uploadthing).request_photo_upload(
            test_instructor, "me.gif", "image/gif", 2048
        )
    assert exc.value.code == "UNSUPPORTED_CONTENT_TYPE"
    uploadthing.prepare_upload.assert_not_called()


def test_rejects_large_file(db, test_instructor, uploadthing):
    with pytest.raises(ValidationException) as exc:
        UploadService(db, client=uploadthing).request_photo_upload(
            test_instructor, "me.png", "image/png", 50 * 1024 * 1024
        )
    assert exc.value.code == "FILE_TOO_LARGE"


def test_provider_error(db, test_instructor, uploadthing):
    uploadthing.prepare_upload.side_effect = UploadthingError("down", status_code=502)

    with pytest.raises(ServiceException) as exc:
        UploadService(db, client=uploadthing).request_photo_upload(
            test_instructor, "me.png", "image/png", 100
        )
    assert exc.value.code == "UPLOAD_FAILED"


def test_not_configured(db, test_instructor):
    with pytest.raises(ServiceException) as exc:
        UploadService(db).request_photo_upload(test_instructor, "me.png", "image/png", 100)
    assert exc.value.code == "UPLOADS_NOT_CONFIGURED"


def test_confirm_photo(db, test_instructor, uploadthing):
    instructor = UploadService(db, client=uploadthing).confirm_photo(test_instructor, "photo123")

    db.refresh(instructor)
    assert instructor.photo_key == "photo123"
    assert instructor.photo_url == "https://utfs.io/f/photo123"
