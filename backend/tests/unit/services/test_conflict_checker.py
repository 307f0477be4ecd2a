"""Tests for ConflictChecker: overlap detection, payment holds and booking windows."""

from datetime import date, datetime, time, timedelta, timezone

import pytest
import pytz

from app.core.exceptions import BusinessRuleException, InsufficientNoticeException
from app.core.timezone_utils import local_to_utc
from app.services.conflict_checker import ConflictChecker, overlaps

LA = pytz.timezone("America/Los_Angeles")


class TestOverlaps:
    def test_touching_ranges_do_not_overlap(self):
        assert not overlaps(time(9), time(10), time(10), time(11))
        assert not overlaps(time(10), time(11), time(9), time(10))

    def test_partial_overlap(self):
        assert overlaps(time(9), time(10, 30), time(10), time(11))

    def test_containment(self):
        assert overlaps(time(8), time(12), time(9), time(10))


def test_instructor_conflict_with_confirmed_lesson(db, make_lesson, test_instructor, lesson_date):
    existing = make_lesson(lesson_date, start=time(9, 0), duration_minutes=90)
    checker = ConflictChecker(db)

    conflicts = checker.check_instructor_conflicts(
        test_instructor.id, lesson_date, time(10, 0), time(11, 0)
    )

    assert [c.id for c in conflicts] == [existing.id]


def test_adjacent_lesson_is_not_a_conflict(db, make_lesson, test_instructor, lesson_date):
    make_lesson(lesson_date, start=time(9, 0), duration_minutes=60)

    conflicts = ConflictChecker(db).check_instructor_conflicts(
        test_instructor.id, lesson_date, time(10, 0), time(11, 0)
    )

    assert conflicts == []


def test_cancelled_and_completed_lessons_do_not_block(
    db, make_lesson, test_instructor, lesson_date
):
    make_lesson(lesson_date, start=time(9, 0), status="CANCELLED")
    make_lesson(lesson_date, start=time(10, 0), status="COMPLETED")

    conflicts = ConflictChecker(db).check_instructor_conflicts(
        test_instructor.id, lesson_date, time(9, 0), time(11, 0)
    )

    assert conflicts == []


def test_pending_lesson_blocks_only_within_hold(db, make_lesson, test_instructor, lesson_date):
    now = datetime.now(timezone.utc)
    make_lesson(lesson_date, start=time(9, 0), status="PENDING", created_at=now - timedelta(minutes=5))
    make_lesson(
        lesson_date, start=time(11, 0), status="PENDING", created_at=now - timedelta(hours=2)
    )
    checker = ConflictChecker(db)

    fresh = checker.check_instructor_conflicts(
        test_instructor.id, lesson_date, time(9, 0), time(10, 0), now=now
    )
    stale = checker.check_instructor_conflicts(
        test_instructor.id, lesson_date, time(11, 0), time(12, 0), now=now
    )

    assert len(fresh) == 1
    assert stale == []


def test_exclude_lesson_id(db, make_lesson, test_instructor, lesson_date):
    lesson = make_lesson(lesson_date, start=time(9, 0))

    conflicts = ConflictChecker(db).check_instructor_conflicts(
        test_instructor.id,
        lesson_date,
        time(9, 0),
        time(10, 0),
        exclude_lesson_id=lesson.id,
    )

    assert conflicts == []


def test_student_conflict_across_instructors(db, make_lesson, test_student, lesson_date):
    make_lesson(lesson_date, start=time(9, 0))

    conflicts = ConflictChecker(db).check_student_conflicts(
        test_student.id, lesson_date, time(9, 30), time(10, 30)
    )

    assert len(conflicts) == 1


class TestTiming:
    def test_rejects_insufficient_notice(self, db):
        day = date(2030, 6, 15)
        now = local_to_utc(day, time(9, 0), LA) - timedelta(hours=3)

        with pytest.raises(InsufficientNoticeException) as exc:
            ConflictChecker(db).validate_timing(day, time(9, 0), LA, now)
        assert exc.value.code == "INSUFFICIENT_NOTICE"

    def test_rejects_past_start(self, db):
        day = date(2030, 6, 15)
        now = local_to_utc(day, time(12, 0), LA)

        with pytest.raises(InsufficientNoticeException) as exc:
            ConflictChecker(db).validate_timing(day, time(9, 0), LA, now)
        assert exc.value.details["provided_hours"] == 0.0

    def test_rejects_beyond_horizon(self, db):
        day = date(2030, 6, 15)
        now = local_to_utc(day, time(9, 0), LA) - timedelta(days=90)

        with pytest.raises(BusinessRuleException) as exc:
            ConflictChecker(db).validate_timing(day, time(9, 0), LA, now)
        assert exc.value.code == "BEYOND_BOOKING_HORIZON"

    def test_accepts_lesson_inside_window(self, db):
        day = date(2030, 6, 15)
        now = local_to_utc(day, time(9, 0), LA) - timedelta(days=3)

        ConflictChecker(db).validate_timing(day, time(9, 0), LA, now)
        assert ConflictChecker.timing_allows(day, time(9, 0), LA, now)

    def test_notice_is_measured_in_location_time(self):
        # 09:00 in Los Angeles is 16:00 UTC during daylight saving time
        day = date(2030, 6, 15)
        now = datetime(2030, 6, 15, 3, 30, tzinfo=timezone.utc)
        assert ConflictChecker.timing_allows(day, time(9, 0), LA, now)
        assert not ConflictChecker.timing_allows(
            day, time(9, 0), LA, now + timedelta(hours=1)
        )
