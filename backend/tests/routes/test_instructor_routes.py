"""Tests for /api/v1/instructors."""

from datetime import timedelta

from fastapi.testclient import TestClient

from app.auth import create_access_token


class TestDirectory:
    def test_list_instructors(self, client: TestClient, test_instructor):
        response = client.get("/api/v1/instructors")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["has_next"] is False
        item = body["items"][0]
        assert item["id"] == test_instructor.id
        assert item["display_name"] == "Karch K."
        assert item["hourly_rate_cents"] == 8000

    def test_skill_level_filter(self, client: TestClient, test_instructor):
        response = client.get("/api/v1/instructors", params={"skill_level": "competitive"})
        assert response.json()["total"] == 0

    def test_invalid_skill_level(self, client: TestClient):
        assert client.get("/api/v1/instructors", params={"skill_level": "pro"}).status_code == 422

    def test_detail(self, client: TestClient, test_instructor_with_availability):
        response = client.get(f"/api/v1/instructors/{test_instructor_with_availability.id}")

        assert response.status_code == 200
        assert len(response.json()["availability_windows"]) == 1
        assert response.json()["certifications"] == ["AVCA Beach Level 2"]

    def test_detail_not_found(self, client: TestClient):
        response = client.get("/api/v1/instructors/01HZZZZZZZZZZZZZZZZZZZZZZZ")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "INSTRUCTOR_NOT_FOUND"


class TestOpenSlots:
    def test_open_slots(self, client: TestClient, test_instructor_with_availability, lesson_date):
        response = client.get(
            f"/api/v1/instructors/{test_instructor_with_availability.id}/availability",
            params={"date": lesson_date.isoformat(), "duration_minutes": 90},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["duration_minutes"] == 90
        assert body["slots"][0] == {
            "start_time": "08:00:00",
            "end_time": "09:30:00",
            "location_id": body["slots"][0]["location_id"],
        }
        assert body["slots"][-1]["start_time"] == "10:30:00"

    def test_invalid_duration(self, client: TestClient, test_instructor, lesson_date):
        response = client.get(
            f"/api/v1/instructors/{test_instructor.id}/availability",
            params={"date": lesson_date.isoformat(), "duration_minutes": 45},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_DURATION"


class TestOwnProfile:
    def test_create_profile(self, client: TestClient, make_profile):
        profile = make_profile("instructor")
        headers = {"Authorization": f"Bearer {create_access_token(profile.id)}"}

        response = client.post(
            "/api/v1/instructors/me",
            json={
                "bio": "Sand specialist",
                "skill_levels": ["beginner", "advanced"],
                "hourly_rate_cents": 7000,
                "certifications": [" CPR ", "", "CPR"],
            },
            headers=headers,
        )

        assert response.status_code == 201
        assert response.json()["skill_levels"] == ["beginner", "advanced"]
        assert response.json()["is_verified"] is False

    def test_students_cannot_create_profile(self, client: TestClient, auth_headers_student):
        response = client.post(
            "/api/v1/instructors/me",
            json={"skill_levels": ["beginner"], "hourly_rate_cents": 7000},
            headers=auth_headers_student,
        )
        assert response.status_code == 403

    def test_update_profile(self, client: TestClient, auth_headers_instructor):
        response = client.patch(
            "/api/v1/instructors/me",
            json={"hourly_rate_cents": 9500, "stripe_account_id": "acct_1Abc"},
            headers=auth_headers_instructor,
        )

        assert response.status_code == 200
        assert response.json()["hourly_rate_cents"] == 9500

    def test_update_rejects_bad_stripe_account(self, client: TestClient, auth_headers_instructor):
        response = client.patch(
            "/api/v1/instructors/me",
            json={"stripe_account_id": "not-an-account"},
            headers=auth_headers_instructor,
        )
        assert response.status_code == 422


class TestOwnAvailability:
    def test_replace_and_read(self, client: TestClient, auth_headers_instructor, location):
        response = client.put(
            "/api/v1/instructors/me/availability",
            json={
                "windows": [
                    {
                        "day_of_week": 5,
                        "start_time": "07:00",
                        "end_time": "11:00",
                        "location_id": location.id,
                    }
                ]
            },
            headers=auth_headers_instructor,
        )

        assert response.status_code == 200
        assert response.json()["windows"][0]["start_time"] == "07:00:00"

        read = client.get("/api/v1/instructors/me/availability", headers=auth_headers_instructor)
        assert len(read.json()["windows"]) == 1

    def test_window_must_end_after_start(self, client: TestClient, auth_headers_instructor):
        response = client.put(
            "/api/v1/instructors/me/availability",
            json={"windows": [{"day_of_week": 1, "start_time": "11:00", "end_time": "09:00"}]},
            headers=auth_headers_instructor,
        )
        assert response.status_code == 422

    def test_overlapping_windows(self, client: TestClient, auth_headers_instructor):
        response = client.put(
            "/api/v1/instructors/me/availability",
            json={
                "windows": [
                    {"day_of_week": 1, "start_time": "08:00", "end_time": "10:00"},
                    {"day_of_week": 1, "start_time": "09:00", "end_time": "11:00"},
                ]
            },
            headers=auth_headers_instructor,
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "OVERLAPPING_WINDOWS"

    def test_blackouts(self, client: TestClient, auth_headers_instructor, lesson_date):
        created = client.post(
            "/api/v1/instructors/me/blackouts",
            json={"blackout_date": lesson_date.isoformat(), "reason": "AVP event"},
            headers=auth_headers_instructor,
        )
        duplicate = client.post(
            "/api/v1/instructors/me/blackouts",
            json={"blackout_date": lesson_date.isoformat()},
            headers=auth_headers_instructor,
        )
        removed = client.delete(
            f"/api/v1/instructors/me/blackouts/{lesson_date.isoformat()}",
            headers=auth_headers_instructor,
        )
        missing = client.delete(
            f"/api/v1/instructors/me/blackouts/{(lesson_date + timedelta(days=1)).isoformat()}",
            headers=auth_headers_instructor,
        )

        assert created.status_code == 201
        assert created.json()["reason"] == "AVP event"
        assert duplicate.status_code == 409
        assert removed.status_code == 204
        assert missing.status_code == 404

    def test_instructor_without_profile(self, client: TestClient, make_profile):
        profile = make_profile("instructor")
        headers = {"Authorization": f"Bearer {create_access_token(profile.id)}"}

        response = client.get("/api/v1/instructors/me/availability", headers=headers)
        assert response.status_code == 404
