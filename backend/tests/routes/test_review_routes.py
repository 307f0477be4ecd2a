"""Tests for /api/v1/reviews."""

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
import pytest


@pytest.fixture
def completed_lesson(make_lesson, lesson_date):
    return make_lesson(
        lesson_date - timedelta(days=14),
        status="COMPLETED",
        completed_at=datetime.now(timezone.utc) - timedelta(days=1),
    )


def test_submit_and_list(
    client: TestClient, auth_headers_student, completed_lesson, test_instructor
):
    created = client.post(
        "/api/v1/reviews",
        json={"lesson_id": completed_lesson.id, "rating": 5, "comment": "Fixed my serve!"},
        headers=auth_headers_student,
    )

    assert created.status_code == 201
    assert created.json()["reviewer_display_name"] == "Kerri W."

    listing = client.get(f"/api/v1/reviews/instructor/{test_instructor.id}")
    summary = client.get(f"/api/v1/reviews/instructor/{test_instructor.id}/summary")

    assert listing.json()["total"] == 1
    assert listing.json()["has_prev"] is False
    assert listing.json()["reviews"][0]["comment"] == "Fixed my serve!"
    assert summary.json()["rating_average"] == 5.0
    assert summary.json()["distribution"]["5"] == 1


def test_duplicate_review(client: TestClient, auth_headers_student, completed_lesson):
    body = {"lesson_id": completed_lesson.id, "rating": 4}
    client.post("/api/v1/reviews", json=body, headers=auth_headers_student)

    response = client.post("/api/v1/reviews", json=body, headers=auth_headers_student)

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "REVIEW_EXISTS"


def test_rating_out_of_range(client: TestClient, auth_headers_student, completed_lesson):
    response = client.post(
        "/api/v1/reviews",
        json={"lesson_id": completed_lesson.id, "rating": 6},
        headers=auth_headers_student,
    )
    assert response.status_code == 422


def test_instructor_response(
    client: TestClient, auth_headers_student, auth_headers_instructor, completed_lesson
):
    review = client.post(
        "/api/v1/reviews",
        json={"lesson_id": completed_lesson.id, "rating": 5},
        headers=auth_headers_student,
    ).json()

    response = client.post(
        f"/api/v1/reviews/{review['id']}/response",
        json={"response_text": "Thanks, see you on the sand"},
        headers=auth_headers_instructor,
    )
    again = client.post(
        f"/api/v1/reviews/{review['id']}/response",
        json={"response_text": "Again"},
        headers=auth_headers_instructor,
    )

    assert response.status_code == 201
    assert response.json()["review_id"] == review["id"]
    assert again.status_code == 409
