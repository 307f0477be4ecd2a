"""
Tests for LessonRepository queries and the live slot index.
"""

from datetime import datetime, time, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from app.models.lesson import Lesson
from app.repositories.factory import RepositoryFactory


@pytest.fixture
def repository(db):
    return RepositoryFactory.create_lesson_repository(db)


def _cutoff():
    return datetime.now(timezone.utc) - timedelta(minutes=30)


class TestLiveLessons:
    def test_confirmed_and_fresh_pending_are_live(
        self, repository, make_lesson, test_instructor, lesson_date
    ):
        confirmed = make_lesson(lesson_date, start=time(9, 0))
        fresh = make_lesson(lesson_date, start=time(11, 0), status="PENDING")
        make_lesson(
            lesson_date,
            start=time(13, 0),
            status="PENDING",
            created_at=datetime.now(timezone.utc) - timedelta(hours=1),
        )
        make_lesson(lesson_date, start=time(15, 0), status="CANCELLED")

        live = repository.get_live_for_instructor_on_date(
            test_instructor.id, lesson_date, _cutoff()
        )

        assert [lesson.id for lesson in live] == [confirmed.id, fresh.id]

    def test_exclude_lesson(self, repository, make_lesson, test_student, lesson_date):
        lesson = make_lesson(lesson_date)

        live = repository.get_live_for_student_on_date(
            test_student.id, lesson_date, _cutoff(), exclude_lesson_id=lesson.id
        )

        assert live == []

    def test_stale_pending_for_slot(self, repository, make_lesson, test_instructor, lesson_date):
        stale = make_lesson(
            lesson_date,
            status="PENDING",
            created_at=datetime.now(timezone.utc) - timedelta(hours=1),
        )

        found = repository.get_stale_pending_for_slot(
            test_instructor.id, lesson_date, time(9, 0), _cutoff()
        )

        assert [lesson.id for lesson in found] == [stale.id]


class TestSlotIndex:
    def test_second_live_lesson_in_same_slot_is_rejected(
        self, db, make_lesson, test_student_2, lesson_date
    ):
        make_lesson(lesson_date, start=time(9, 0))

        with pytest.raises(IntegrityError):
            make_lesson(lesson_date, start=time(9, 0), status="PENDING", student=test_student_2)
        db.rollback()

    def test_cancelled_lessons_do_not_hold_the_slot(
        self, db, make_lesson, test_student_2, lesson_date
    ):
        make_lesson(lesson_date, start=time(9, 0), status="CANCELLED")

        rebooked = make_lesson(lesson_date, start=time(9, 0), student=test_student_2)

        assert db.get(Lesson, rebooked.id).status == "CONFIRMED"


class TestJobsQueries:
    def test_confirmed_between_dates_skips_reminded(self, repository, make_lesson, lesson_date):
        due = make_lesson(lesson_date, start=time(9, 0))
        make_lesson(
            lesson_date, start=time(11, 0), reminder_sent_at=datetime.now(timezone.utc)
        )

        found = repository.get_confirmed_between_dates(
            lesson_date, lesson_date, unreminded_only=True
        )

        assert [lesson.id for lesson in found] == [due.id]

    def test_by_payment_intent(self, repository, make_lesson, lesson_date):
        lesson = make_lesson(lesson_date, payment_intent_id="pi_lookup")

        assert repository.get_by_payment_intent_id("pi_lookup").id == lesson.id
        assert repository.get_by_payment_intent_id("pi_missing") is None
