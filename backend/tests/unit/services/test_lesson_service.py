"""
Tests for LessonService.

Stripe runs in mock mode unless a test injects a MagicMock to assert on
refunds; email goes to the console provider.
"""

from datetime import datetime, time, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from app.core.exceptions import (
    BookingConflictException,
    BusinessRuleException,
    ForbiddenException,
    InvalidStatusTransitionException,
    NotFoundException,
    ValidationException,
)
from app.models.availability import InstructorAvailability, InstructorBlackout
from app.models.instructor import Instructor
from app.models.lesson import Lesson
from app.models.payment import Payment
from app.services.lesson_service import HOLD_EXPIRED_REASON, LessonService
from app.services.stripe_service import StripeService


def _booking(instructor, location, lesson_date, **overrides):
    data = {
        "instructor_id": instructor.id,
        "location_id": location.id,
        "lesson_date": lesson_date,
        "start_time": time(9, 0),
        "duration_minutes": 60,
        "lesson_type": "private",
        "participants": 1,
    }
    data.update(overrides)
    return data


@pytest.fixture
def mock_stripe():
    stripe_service = MagicMock(spec=StripeService)
    stripe_service.refund_payment.return_value = {
        "id": "re_test",
        "amount": 8000,
        "status": "succeeded",
    }
    stripe_service.cancel_payment_intent.return_value = "canceled"
    return stripe_service


class TestBookLesson:
    def test_books_pending_lesson_with_payment_intent(
        self, db, test_student, test_instructor_with_availability, location, lesson_date
    ):
        service = LessonService(db)

        lesson, intent = service.book_lesson(
            test_student, _booking(test_instructor_with_availability, location, lesson_date)
        )

        assert lesson.status == "PENDING"
        assert lesson.end_time == time(10, 0)
        assert lesson.price_cents == 8000
        assert lesson.platform_fee_cents == 800
        assert lesson.skill_level == "intermediate"
        assert intent["id"] == f"mock_pi_{lesson.id}"
        assert intent["client_secret"].endswith("_secret_mock")
        assert lesson.payment_intent_id == intent["id"]

        payment = db.query(Payment).filter_by(lesson_id=lesson.id).one()
        assert payment.amount_cents == 8000
        assert payment.application_fee_cents == 800

    def test_semi_private_price_snapshot(
        self, db, test_student, test_instructor_with_availability, location, lesson_date
    ):
        lesson, _ = LessonService(db).book_lesson(
            test_student,
            _booking(
                test_instructor_with_availability,
                location,
                lesson_date,
                lesson_type="semi_private",
                participants=2,
                duration_minutes=90,
            ),
        )
        assert lesson.price_cents == 18000
        assert lesson.end_time == time(10, 30)

    def test_rejects_time_outside_availability(
        self, db, test_student, test_instructor_with_availability, location, lesson_date
    ):
        with pytest.raises(BusinessRuleException) as exc:
            LessonService(db).book_lesson(
                test_student,
                _booking(
                    test_instructor_with_availability,
                    location,
                    lesson_date,
                    start_time=time(11, 30),
                ),
            )
        assert exc.value.code == "OUTSIDE_AVAILABILITY"

    def test_rejects_blacked_out_date(
        self, db, test_student, test_instructor_with_availability, location, lesson_date
    ):
        db.add(
            InstructorBlackout(
                instructor_id=test_instructor_with_availability.id, blackout_date=lesson_date
            )
        )
        db.commit()

        with pytest.raises(BusinessRuleException) as exc:
            LessonService(db).book_lesson(
                test_student, _booking(test_instructor_with_availability, location, lesson_date)
            )
        assert exc.value.code == "INSTRUCTOR_UNAVAILABLE"

    def test_rejects_overlap_with_instructor_lesson(
        self,
        db,
        make_lesson,
        test_student,
        test_student_2,
        test_instructor_with_availability,
        location,
        lesson_date,
    ):
        make_lesson(lesson_date, start=time(9, 30), student=test_student_2)

        with pytest.raises(BookingConflictException) as exc:
            LessonService(db).book_lesson(
                test_student, _booking(test_instructor_with_availability, location, lesson_date)
            )
        assert exc.value.code == "BOOKING_CONFLICT"

    def test_slot_taken_between_check_and_insert_is_a_conflict(
        self,
        db,
        make_lesson,
        mock_stripe,
        test_student,
        test_student_2,
        test_instructor_with_availability,
        location,
        lesson_date,
    ):
        holder = make_lesson(lesson_date, start=time(9, 0), student=test_student_2)
        checker = MagicMock()
        checker.check_instructor_conflicts.return_value = []
        checker.check_student_conflicts.return_value = []
        service = LessonService(db, stripe_service=mock_stripe, conflict_checker=checker)

        with pytest.raises(BookingConflictException):
            service.book_lesson(
                test_student, _booking(test_instructor_with_availability, location, lesson_date)
            )

        lessons = (
            db.query(Lesson).filter_by(instructor_id=test_instructor_with_availability.id).all()
        )
        assert [lesson.id for lesson in lessons] == [holder.id]
        mock_stripe.create_payment_intent.assert_not_called()

    def test_rejects_student_double_booking(
        self,
        db,
        make_lesson,
        make_profile,
        test_student,
        test_instructor_with_availability,
        location,
        lesson_date,
    ):
        other_profile = make_profile("instructor")
        other = Instructor(profile_id=other_profile.id, hourly_rate_cents=6000, skill_levels=[])
        db.add(other)
        db.flush()
        db.add(
            InstructorAvailability(
                instructor_id=other.id,
                day_of_week=lesson_date.weekday(),
                start_time=time(8, 0),
                end_time=time(12, 0),
                location_id=location.id,
            )
        )
        db.commit()
        make_lesson(lesson_date, start=time(9, 0))

        with pytest.raises(BookingConflictException) as exc:
            LessonService(db).book_lesson(test_student, _booking(other, location, lesson_date))
        assert "already have a lesson" in exc.value.message

    def test_expired_hold_releases_slot(
        self,
        db,
        make_lesson,
        test_student,
        test_student_2,
        test_instructor_with_availability,
        location,
        lesson_date,
    ):
        stale = make_lesson(
            lesson_date,
            start=time(9, 0),
            status="PENDING",
            student=test_student_2,
            created_at=datetime.now(timezone.utc) - timedelta(hours=3),
        )

        lesson, _ = LessonService(db).book_lesson(
            test_student, _booking(test_instructor_with_availability, location, lesson_date)
        )

        db.refresh(stale)
        assert lesson.status == "PENDING"
        assert stale.status == "CANCELLED"
        assert stale.cancellation_reason == HOLD_EXPIRED_REASON

    def test_rejects_booking_yourself(
        self, db, instructor_profile, test_instructor_with_availability, location, lesson_date
    ):
        with pytest.raises(ValidationException):
            LessonService(db).book_lesson(
                instructor_profile,
                _booking(test_instructor_with_availability, location, lesson_date),
            )

    def test_rejects_instructor_not_accepting(
        self, db, test_student, test_instructor_with_availability, location, lesson_date
    ):
        test_instructor_with_availability.is_accepting_students = False
        db.commit()

        with pytest.raises(BusinessRuleException) as exc:
            LessonService(db).book_lesson(
                test_student, _booking(test_instructor_with_availability, location, lesson_date)
            )
        assert exc.value.code == "INSTRUCTOR_NOT_ACCEPTING"

    def test_rejects_inactive_location(
        self, db, test_student, test_instructor_with_availability, location, lesson_date
    ):
        location.is_active = False
        db.commit()

        with pytest.raises(ValidationException) as exc:
            LessonService(db).book_lesson(
                test_student, _booking(test_instructor_with_availability, location, lesson_date)
            )
        assert exc.value.code == "LOCATION_INACTIVE"

    def test_rejects_unknown_instructor(self, db, test_student, location, lesson_date):
        data = {
            "instructor_id": "01HZZZZZZZZZZZZZZZZZZZZZZZ",
            "location_id": location.id,
            "lesson_date": lesson_date,
            "start_time": time(9, 0),
            "duration_minutes": 60,
        }
        with pytest.raises(NotFoundException):
            LessonService(db).book_lesson(test_student, data)

    def test_rejects_lesson_spanning_midnight(self):
        with pytest.raises(ValidationException) as exc:
            LessonService._compute_end_time(datetime(2030, 6, 15).date(), time(23, 30), 60)
        assert exc.value.code == "LESSON_SPANS_MIDNIGHT"


class TestCancelLesson:
    def test_cancel_pending_cancels_intent(self, db, make_lesson, test_student, lesson_date):
        lesson = make_lesson(lesson_date, status="PENDING", payment_intent_id="mock_pi_abc")

        cancelled = LessonService(db).cancel_lesson(lesson.id, test_student, reason="Sick")

        assert cancelled.status == "CANCELLED"
        assert cancelled.payment_status == "canceled"
        assert cancelled.cancelled_by_id == test_student.id
        assert cancelled.cancellation_reason == "Sick"

    def test_student_early_cancel_refunds_in_full(
        self, db, make_lesson, test_student, lesson_date, mock_stripe
    ):
        lesson = make_lesson(lesson_date, payment_intent_id="pi_1", payment_status="succeeded")

        LessonService(db, stripe_service=mock_stripe).cancel_lesson(lesson.id, test_student)

        mock_stripe.refund_payment.assert_called_once()
        assert lesson.status == "CANCELLED"

    def test_student_late_cancel_gets_no_refund(
        self, db, make_lesson, test_student, lesson_date, mock_stripe
    ):
        lesson = make_lesson(lesson_date, payment_intent_id="pi_1", payment_status="succeeded")
        now = lesson.start_utc() - timedelta(hours=2)

        LessonService(db, stripe_service=mock_stripe).cancel_lesson(
            lesson.id, test_student, now=now
        )

        mock_stripe.refund_payment.assert_not_called()
        assert lesson.status == "CANCELLED"
        assert lesson.payment_status == "succeeded"

    def test_instructor_late_cancel_still_refunds(
        self, db, make_lesson, instructor_profile, lesson_date, mock_stripe
    ):
        lesson = make_lesson(lesson_date, payment_intent_id="pi_1", payment_status="succeeded")
        now = lesson.start_utc() - timedelta(hours=2)

        LessonService(db, stripe_service=mock_stripe).cancel_lesson(
            lesson.id, instructor_profile, now=now
        )

        mock_stripe.refund_payment.assert_called_once()

    def test_cannot_cancel_after_start(self, db, make_lesson, test_student, lesson_date):
        lesson = make_lesson(lesson_date)

        with pytest.raises(BusinessRuleException) as exc:
            LessonService(db).cancel_lesson(
                lesson.id, test_student, now=lesson.start_utc() + timedelta(minutes=5)
            )
        assert exc.value.code == "LESSON_ALREADY_STARTED"

    def test_stranger_cannot_cancel(self, db, make_lesson, test_student_2, lesson_date):
        lesson = make_lesson(lesson_date)

        with pytest.raises(ForbiddenException):
            LessonService(db).cancel_lesson(lesson.id, test_student_2)

    def test_completed_lesson_cannot_be_cancelled(
        self, db, make_lesson, test_student, lesson_date
    ):
        lesson = make_lesson(lesson_date, status="COMPLETED")

        with pytest.raises(InvalidStatusTransitionException):
            LessonService(db).cancel_lesson(lesson.id, test_student)


class TestCompletionAndNoShow:
    def test_complete_after_end(self, db, make_lesson, instructor_profile, lesson_date):
        lesson = make_lesson(lesson_date)
        now = lesson.end_utc() + timedelta(minutes=1)

        completed = LessonService(db).complete_lesson(lesson.id, instructor_profile, now=now)

        assert completed.status == "COMPLETED"
        assert completed.completed_at is not None

    def test_cannot_complete_before_end(self, db, make_lesson, instructor_profile, lesson_date):
        lesson = make_lesson(lesson_date)

        with pytest.raises(BusinessRuleException) as exc:
            LessonService(db).complete_lesson(lesson.id, instructor_profile)
        assert exc.value.code == "LESSON_NOT_ENDED"

    def test_student_cannot_complete(self, db, make_lesson, test_student, lesson_date):
        lesson = make_lesson(lesson_date)

        with pytest.raises(ForbiddenException):
            LessonService(db).complete_lesson(lesson.id, test_student)

    def test_pending_lesson_cannot_be_completed(
        self, db, make_lesson, instructor_profile, lesson_date
    ):
        lesson = make_lesson(lesson_date, status="PENDING")

        with pytest.raises(InvalidStatusTransitionException):
            LessonService(db).complete_lesson(
                lesson.id, instructor_profile, now=lesson.end_utc() + timedelta(hours=1)
            )

    def test_no_show_after_start(self, db, make_lesson, instructor_profile, lesson_date):
        lesson = make_lesson(lesson_date)

        result = LessonService(db).mark_no_show(
            lesson.id, instructor_profile, now=lesson.start_utc() + timedelta(minutes=20)
        )

        assert result.status == "NO_SHOW"

    def test_no_show_before_start_rejected(self, db, make_lesson, instructor_profile, lesson_date):
        lesson = make_lesson(lesson_date)

        with pytest.raises(BusinessRuleException) as exc:
            LessonService(db).mark_no_show(lesson.id, instructor_profile)
        assert exc.value.code == "LESSON_NOT_STARTED"


class TestRetryPayment:
    def test_reuses_open_intent(
        self, db, test_student, test_instructor_with_availability, location, lesson_date
    ):
        service = LessonService(db)
        lesson, intent = service.book_lesson(
            test_student, _booking(test_instructor_with_availability, location, lesson_date)
        )

        _, retried = service.retry_payment(lesson.id, test_student)

        assert retried["id"] == intent["id"]
        assert db.query(Payment).filter_by(lesson_id=lesson.id).count() == 1

    def test_rejects_expired_hold(self, db, make_lesson, test_student, lesson_date):
        lesson = make_lesson(
            lesson_date,
            status="PENDING",
            created_at=datetime.now(timezone.utc) - timedelta(hours=1),
        )

        with pytest.raises(BusinessRuleException) as exc:
            LessonService(db).retry_payment(lesson.id, test_student)
        assert exc.value.code == "PAYMENT_HOLD_EXPIRED"

    def test_rejects_confirmed_lesson(self, db, make_lesson, test_student, lesson_date):
        lesson = make_lesson(lesson_date)

        with pytest.raises(BusinessRuleException) as exc:
            LessonService(db).retry_payment(lesson.id, test_student)
        assert exc.value.code == "LESSON_NOT_PENDING"

    def test_only_the_student_can_retry(self, db, make_lesson, test_student_2, lesson_date):
        lesson = make_lesson(lesson_date, status="PENDING")

        with pytest.raises(ForbiddenException):
            LessonService(db).retry_payment(lesson.id, test_student_2)


class TestPeriodicJobs:
    def test_expire_unpaid_lessons(self, db, make_lesson, lesson_date):
        now = datetime.now(timezone.utc)
        stale = make_lesson(
            lesson_date,
            start=time(9, 0),
            status="PENDING",
            payment_intent_id="mock_pi_stale",
            created_at=now - timedelta(hours=1),
        )
        fresh = make_lesson(
            lesson_date, start=time(11, 0), status="PENDING", created_at=now - timedelta(minutes=5)
        )

        expired = LessonService(db).expire_unpaid_lessons(now)

        db.refresh(stale)
        db.refresh(fresh)
        assert expired == 1
        assert stale.status == "CANCELLED"
        assert stale.payment_status == "canceled"
        assert stale.cancellation_reason == HOLD_EXPIRED_REASON
        assert fresh.status == "PENDING"

    def test_send_due_reminders_once(self, db, make_lesson, lesson_date):
        lesson = make_lesson(lesson_date)
        now = lesson.start_utc() - timedelta(hours=3)
        service = LessonService(db)

        assert service.send_due_reminders(now) == 1
        db.refresh(lesson)
        assert lesson.reminder_sent_at is not None
        assert service.send_due_reminders(now) == 0

    def test_reminders_skip_lessons_outside_lead_time(self, db, make_lesson, lesson_date):
        lesson = make_lesson(lesson_date)
        now = lesson.start_utc() - timedelta(hours=30)

        assert LessonService(db).send_due_reminders(now) == 0

    def test_complete_past_lessons(self, db, make_lesson, lesson_date):
        lesson = make_lesson(lesson_date)
        pending = make_lesson(lesson_date, start=time(11, 0), status="PENDING")
        now = lesson.end_utc() + timedelta(hours=25)

        completed = LessonService(db).complete_past_lessons(now)

        db.refresh(lesson)
        db.refresh(pending)
        assert completed == 1
        assert lesson.status == "COMPLETED"
        assert pending.status == "PENDING"

    def test_recently_ended_lessons_wait_for_instructor(self, db, make_lesson, lesson_date):
        lesson = make_lesson(lesson_date)

        assert LessonService(db).complete_past_lessons(lesson.end_utc() + timedelta(hours=2)) == 0
