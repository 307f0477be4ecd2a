from unittest.mock import MagicMock

from fastapi.testclient import TestClient
import pytest

from app.api.dependencies.services import get_upload_service
from app.integrations.uploadthing_client import UploadthingClient
from app.main import fastapi_app
from app.services.upload_service import UploadService


@pytest.fixture
def uploadthing_client(client: TestClient, db):
    uploadthing = MagicMock(spec=UploadthingClient)
    uploadthing.prepare_upload.return_value = {
        "key": "abc123",
        "url": "https://sea1.ingest.uploadthing.com/abc123",
        "fields": {},
    }
    fastapi_app.dependency_overrides[get_upload_service] = lambda: UploadService(
        db, client=uploadthing
    )
    yield uploadthing
    fastapi_app.dependency_overrides.pop(get_upload_service, None)


def test_request_and_confirm_photo(client: TestClient, auth_headers_instructor, uploadthing_client):
    target = client.post(
        "/api/v1/uploads/instructor-photo",
        json={"filename": "me.png", "content_type": "image/png", "size_bytes": 1000},
        headers=auth_headers_instructor,
    )
    confirmed = client.post(
        "/api/v1/uploads/instructor-photo/confirm",
        json={"file_key": "abc123"},
        headers=auth_headers_instructor,
    )

    assert target.status_code == 200
    assert target.json()["file_url"] == "https://utfs.io/f/abc123"
    assert confirmed.json() == {"photo_url": "https://utfs.io/f/abc123"}


def test_rejects_unsupported_type(client: TestClient, auth_headers_instructor, uploadthing_client):
    response = client.post(
        "/api/v1/uploads/instructor-photo",
        json={"filename": "me.gif", "content_type": "image/gif", "size_bytes": 1000},
        headers=auth_headers_instructor,
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "UNSUPPORTED_CONTENT_TYPE"


def test_rejects_bad_file_key(client: TestClient, auth_headers_instructor, uploadthing_client):
    response = client.post(
        "/api/v1/uploads/instructor-photo/confirm",
        json={"file_key": "../etc/passwd"},
        headers=auth_headers_instructor,
    )
    assert response.status_code == 422


def test_uploads_not_configured(client: TestClient, auth_headers_instructor):
    response = client.post(
        "/api/v1/uploads/instructor-photo",
        json={"filename": "me.png", "content_type": "image/png", "size_bytes": 1000},
        headers=auth_headers_instructor,
    )

    assert response.status_code == 500
    assert response.json()["detail"]["code"] == "UPLOADS_NOT_CONFIGURED"
