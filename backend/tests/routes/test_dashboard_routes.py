from datetime import timedelta

from fastapi.testclient import TestClient


def test_student_dashboard(client: TestClient, make_lesson, auth_headers_student, lesson_date):
    lesson = make_lesson(lesson_date)

    response = client.get("/api/v1/dashboard/student", headers=auth_headers_student)

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["upcoming_lessons"]] == [lesson.id]


def test_instructor_dashboard(client: TestClient, make_lesson, auth_headers_instructor, lesson_date):
    make_lesson(lesson_date - timedelta(days=14), status="COMPLETED")

    response = client.get("/api/v1/dashboard/instructor", headers=auth_headers_instructor)

    assert response.status_code == 200
    assert response.json()["earnings_cents"] == 7200
    assert response.json()["lesson_counts"]["COMPLETED"] == 1


def test_dashboards_are_role_scoped(client: TestClient, auth_headers_student, auth_headers_instructor):
    assert client.get("/api/v1/dashboard/instructor", headers=auth_headers_student).status_code == 403
    assert client.get("/api/v1/dashboard/student", headers=auth_headers_instructor).status_code == 403
