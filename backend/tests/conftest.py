# backend/tests/conftest.py
"""
Pytest configuration for the Sideout backend.

Tests run against an in-memory SQLite database; the schema is created fresh
for every test. Stripe runs in mock mode (no secret key) and email goes to the
console provider, with Resend patched as a second line of defence.
"""

import os

# Set testing mode BEFORE any app imports
os.environ["is_testing"] = "true"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["SITE_MODE"] = "local"
os.environ.pop("UPLOADTHING_TOKEN", None)

# Never send real email from any test
import unittest.mock

global_resend_mock = unittest.mock.patch("resend.Emails.send")
mocked_send = global_resend_mock.start()
mocked_send.return_value = {"id": "test-email-id"}

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session

from app.auth import create_access_token, get_password_hash
from app.core.enums import LessonStatus, RoleName
from app.core.timezone_utils import get_location_now
from app.database import Base, SessionLocal, engine, get_db
from app.main import fastapi_app as app
from app.models import (
    Instructor,
    InstructorAvailability,
    Lesson,
    Location,
    Profile,
)

TEST_PASSWORD = "SandCourt123!"
# bcrypt is slow on purpose; hash the shared test password once
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)

LA_TIMEZONE = "America/Los_Angeles"


@pytest.fixture
def db() -> Session:
    """Fresh schema and session for every test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Test client whose requests share the test session."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_profile(db: Session) -> Callable[..., Profile]:
    counter = {"n": 0}

    def _make(role: str = RoleName.STUDENT.value, **overrides: Any) -> Profile:
        counter["n"] += 1
        fields: Dict[str, Any] = {
            "email": f"{role}{counter['n']}@example.com",
            "hashed_password": TEST_PASSWORD_HASH,
            "first_name": role.capitalize(),
            "last_name": f"Tester{counter['n']}",
            "role": role,
            "is_active": True,
        }
        fields.update(overrides)
        profile = Profile(**fields)
        db.add(profile)
        db.commit()
        return profile

    return _make


@pytest.fixture
def location(db: Session) -> Location:
    beach = Location(
        name="Main Beach",
        address="1 Ocean Ave",
        city="Santa Monica",
        state="CA",
        court_count=8,
        timezone=LA_TIMEZONE,
        amenities=["parking", "showers"],
        is_active=True,
    )
    db.add(beach)
    db.commit()
    return beach


@pytest.fixture
def test_student(make_profile) -> Profile:
    return make_profile(
        RoleName.STUDENT.value,
        email="student@example.com",
        first_name="Kerri",
        last_name="Walsh",
        skill_level="intermediate",
    )


@pytest.fixture
def test_student_2(make_profile) -> Profile:
    return make_profile(
        RoleName.STUDENT.value, email="student2@example.com", first_name="Misty", last_name="May"
    )


@pytest.fixture
def test_admin(make_profile) -> Profile:
    return make_profile(RoleName.ADMIN.value, email="admin@example.com")


@pytest.fixture
def instructor_profile(make_profile) -> Profile:
    return make_profile(
        RoleName.INSTRUCTOR.value,
        email="coach@example.com",
        first_name="Karch",
        last_name="Kiraly",
    )


@pytest.fixture
def test_instructor(db: Session, instructor_profile: Profile) -> Instructor:
    instructor = Instructor(
        profile_id=instructor_profile.id,
        bio="Former pro, teaching the fundamentals",
        years_experience=10,
        certifications=["AVCA Beach Level 2"],
        specialties=["serving", "defense"],
        skill_levels=["beginner", "intermediate"],
        hourly_rate_cents=8000,
        is_verified=True,
        is_accepting_students=True,
    )
    db.add(instructor)
    db.commit()
    return instructor


@pytest.fixture
def lesson_date() -> date:
    """A date a week out, comfortably inside the booking horizon."""
    return (get_location_now(None) + timedelta(days=7)).date()


@pytest.fixture
def test_instructor_with_availability(
    db: Session, test_instructor: Instructor, location: Location, lesson_date: date
) -> Instructor:
    """Instructor teaching 08:00-12:00 at Main Beach on the weekday of lesson_date."""
    db.add(
        InstructorAvailability(
            instructor_id=test_instructor.id,
            day_of_week=lesson_date.weekday(),
            start_time=time(8, 0),
            end_time=time(12, 0),
            location_id=location.id,
        )
    )
    db.commit()
    db.refresh(test_instructor)
    return test_instructor


@pytest.fixture
def make_lesson(db: Session, test_student: Profile, test_instructor: Instructor, location: Location):
    """Insert a lesson directly, bypassing booking rules."""

    def _make(
        lesson_date: date,
        start: time = time(9, 0),
        duration_minutes: int = 60,
        status: str = LessonStatus.CONFIRMED.value,
        student: Optional[Profile] = None,
        created_at: Optional[datetime] = None,
        **overrides: Any,
    ) -> Lesson:
        end = (datetime.combine(lesson_date, start) + timedelta(minutes=duration_minutes)).time()
        price = test_instructor.hourly_rate_cents * duration_minutes // 60
        fields: Dict[str, Any] = {
            "student_id": (student or test_student).id,
            "instructor_id": test_instructor.id,
            "location_id": location.id,
            "lesson_date": lesson_date,
            "start_time": start,
            "end_time": end,
            "duration_minutes": duration_minutes,
            "lesson_type": "private",
            "participants": 1,
            "status": status,
            "price_cents": price,
            "platform_fee_cents": price // 10,
            "created_at": created_at or datetime.now(timezone.utc),
        }
        fields.update(overrides)
        lesson = Lesson(**fields)
        db.add(lesson)
        db.commit()
        db.refresh(lesson)
        return lesson

    return _make


# ---------------------------------------------------------------------------
# Auth headers
# ---------------------------------------------------------------------------


def _auth_headers(profile: Profile) -> dict:
    token = create_access_token(profile.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers_student(test_student: Profile) -> dict:
    """Get auth headers for test student."""
    return _auth_headers(test_student)


@pytest.fixture
def auth_headers_student_2(test_student_2: Profile) -> dict:
    return _auth_headers(test_student_2)


@pytest.fixture
def auth_headers_instructor(test_instructor: Instructor, instructor_profile: Profile) -> dict:
    """Get auth headers for the instructor owning test_instructor."""
    return _auth_headers(instructor_profile)


@pytest.fixture
def auth_headers_admin(test_admin: Profile) -> dict:
    return _auth_headers(test_admin)
