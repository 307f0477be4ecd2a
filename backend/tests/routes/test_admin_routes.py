"""Tests for /api/v1/admin."""

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient


def test_admin_only(client: TestClient, auth_headers_student, test_instructor):
    response = client.post(
        f"/api/v1/admin/instructors/{test_instructor.id}/verify",
        json={"is_verified": False},
        headers=auth_headers_student,
    )
    assert response.status_code == 403


def test_verify_instructor(client: TestClient, auth_headers_admin, test_instructor):
    response = client.post(
        f"/api/v1/admin/instructors/{test_instructor.id}/verify",
        json={"is_verified": False},
        headers=auth_headers_admin,
    )

    assert response.status_code == 200
    assert response.json()["is_verified"] is False


def test_hide_review(
    client: TestClient,
    db,
    auth_headers_admin,
    auth_headers_student,
    make_lesson,
    lesson_date,
    test_instructor,
):
    lesson = make_lesson(
        lesson_date - timedelta(days=14),
        status="COMPLETED",
        completed_at=datetime.now(timezone.utc) - timedelta(days=1),
    )
    review = client.post(
        "/api/v1/reviews",
        json={"lesson_id": lesson.id, "rating": 2},
        headers=auth_headers_student,
    ).json()

    response = client.post(
        f"/api/v1/admin/reviews/{review['id']}/visibility",
        json={"is_visible": False},
        headers=auth_headers_admin,
    )

    assert response.status_code == 200
    db.refresh(test_instructor)
    assert test_instructor.review_count == 0
    assert client.get(f"/api/v1/reviews/instructor/{test_instructor.id}").json()["total"] == 0


def test_manage_locations(client: TestClient, auth_headers_admin):
    created = client.post(
        "/api/v1/admin/locations",
        json={
            "name": "Manhattan Beach Pier",
            "address": "2 Manhattan Beach Blvd",
            "city": "Manhattan Beach",
            "court_count": 12,
        },
        headers=auth_headers_admin,
    )
    assert created.status_code == 201
    location_id = created.json()["id"]

    updated = client.patch(
        f"/api/v1/admin/locations/{location_id}",
        json={"is_active": False},
        headers=auth_headers_admin,
    )

    assert updated.json()["is_active"] is False
    assert client.get("/api/v1/locations").json() == []


def test_rejects_unknown_timezone(client: TestClient, auth_headers_admin):
    response = client.post(
        "/api/v1/admin/locations",
        json={"name": "X", "address": "Y", "city": "Z", "timezone": "Mars/Olympus"},
        headers=auth_headers_admin,
    )
    assert response.status_code == 422
