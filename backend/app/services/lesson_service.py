# backend/app/services/lesson_service.py
"""
Lesson Service for the Sideout Platform

Handles all lesson-related business logic: booking, viewing, cancelling
with the refund policy, completion and no-shows, payment retries, and the
periodic jobs that expire unpaid holds, send reminders and complete past
lessons.

Double booking is ultimately prevented by the partial unique index on live
lessons; the conflict checks here produce friendly errors for the common case
and the index decides races.
"""

from datetime import date, datetime, time, timedelta
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import LessonStatus
from ..core.exceptions import (
    BookingConflictException,
    BusinessRuleException,
    ForbiddenException,
    InvalidStatusTransitionException,
    NotFoundException,
    ServiceException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc, get_location_timezone, hours_until, utc_now
from ..models.instructor import Instructor
from ..models.lesson import Lesson
from ..models.profile import Profile
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .availability_service import AvailabilityService
from .base import BaseService
from .conflict_checker import ConflictChecker
from .location_service import LocationService
from .notification_service import NotificationService
from .pricing_service import PricingService
from .stripe_service import StripeService

logger = logging.getLogger(__name__)

HOLD_EXPIRED_REASON = "Payment not completed in time"


class LessonService(BaseService):
    """
    Service layer for lesson operations.

    Centralizes all lesson business logic and coordinates with the
    conflict checker, pricing, Stripe and notification services.
    """

    def __init__(
        self,
        db: Session,
        stripe_service: Optional[StripeService] = None,
        notification_service: Optional[NotificationService] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        pricing_service: Optional[PricingService] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_lesson_repository(db)
        self.instructor_repository = RepositoryFactory.create_instructor_repository(db)
        self.notification_service = notification_service or NotificationService(db)
        self.stripe_service = stripe_service or StripeService(
            db, notification_service=self.notification_service
        )
        self.conflict_checker = conflict_checker or ConflictChecker(db, self.repository)
        self.pricing_service = pricing_service or PricingService(db)
        self.availability_service = AvailabilityService(db, conflict_checker=self.conflict_checker)
        self.location_service = LocationService(db)

    # ------------------------------------------------------------------ #
    # Booking
    # ------------------------------------------------------------------ #

    @BaseService.measure_operation("book_lesson")
    def book_lesson(
        self, student: Profile, data: Dict[str, Any], now: Optional[datetime] = None
    ) -> Tuple[Lesson, Dict[str, Any]]:
        """
        Book a lesson and open a payment intent for it.

        Args:
            student: The booking student
            data: Validated LessonCreate fields
            now: Reference time (defaults to the current time)

        Returns:
            Tuple of (PENDING lesson, payment intent dict with client_secret)

        Raises:
            NotFoundException: Unknown instructor or location
            ValidationException: Bad duration, participants or times
            BusinessRuleException: Timing, availability or instructor rules
            BookingConflictException: Slot taken by the instructor or the student
        """
        now = now or utc_now()
        instructor_id = data["instructor_id"]
        lesson_date: date = data["lesson_date"]
        start_time: time = data["start_time"]
        duration = data["duration_minutes"]
        lesson_type = data.get("lesson_type") or "private"
        participants = data.get("participants") or 1

        self.log_operation(
            "book_lesson", student_id=student.id, instructor_id=instructor_id, date=str(lesson_date)
        )

        instructor = self._get_bookable_instructor(instructor_id, student)
        location = self.location_service.get_active_location(data["location_id"])
        self.pricing_service.validate_lesson_shape(lesson_type, duration, participants)
        end_time = self._compute_end_time(lesson_date, start_time, duration)

        self.conflict_checker.validate_timing(
            lesson_date, start_time, get_location_timezone(location), now
        )
        self.availability_service.validate_slot_available(
            instructor.id, lesson_date, start_time, end_time, location.id
        )

        if self.conflict_checker.check_instructor_conflicts(
            instructor.id, lesson_date, start_time, end_time, now=now
        ):
            raise BookingConflictException(
                details={"lesson_date": lesson_date.isoformat(), "start_time": str(start_time)}
            )
        if self.conflict_checker.check_student_conflicts(
            student.id, lesson_date, start_time, end_time, now=now
        ):
            raise BookingConflictException("You already have a lesson at this time")

        quote = self.pricing_service.quote(instructor, lesson_type, duration, participants)

        try:
            with self.transaction():
                self._release_stale_holds(instructor.id, lesson_date, start_time, now)
                lesson = self.repository.create(
                    student_id=student.id,
                    instructor_id=instructor.id,
                    location_id=location.id,
                    lesson_date=lesson_date,
                    start_time=start_time,
                    end_time=end_time,
                    duration_minutes=duration,
                    lesson_type=lesson_type,
                    participants=participants,
                    skill_level=data.get("skill_level") or student.skill_level,
                    student_note=data.get("student_note"),
                    status=LessonStatus.PENDING.value,
                    price_cents=quote.price_cents,
                    platform_fee_cents=quote.platform_fee_cents,
                    created_at=now,
                )
        except IntegrityError:
            self.logger.warning(
                f"Slot {lesson_date} {start_time} for instructor {instructor.id} taken concurrently"
            )
            raise BookingConflictException()

        try:
            intent = self.stripe_service.create_payment_intent(lesson, instructor)
        except ServiceException:
            with self.transaction():
                self._mark_cancelled(lesson, None, "Payment could not be started", now)
            raise

        with self.transaction():
            self.stripe_service.record_payment_intent(lesson, intent)

        prometheus_metrics.inc_lessons_booked(lesson_type)
        self.logger.info(f"Lesson {lesson.id} booked, awaiting payment {intent['id']}")
        return lesson, intent

    def _get_bookable_instructor(self, instructor_id: str, student: Profile) -> Instructor:
        instructor = self.instructor_repository.get_by_id(instructor_id)
        if instructor is None or not instructor.profile or not instructor.profile.is_active:
            raise NotFoundException(
                "Instructor not found",
                code="INSTRUCTOR_NOT_FOUND",
                details={"instructor_id": instructor_id},
            )
        if instructor.profile_id == student.id:
            raise ValidationException("You cannot book a lesson with yourself")
        if not instructor.is_accepting_students:
            raise BusinessRuleException(
                "Instructor is not accepting new students",
                code="INSTRUCTOR_NOT_ACCEPTING",
            )
        return instructor

    @staticmethod
    def _compute_end_time(lesson_date: date, start_time: time, duration_minutes: int) -> time:
        start = datetime.combine(lesson_date, start_time)
        end = start + timedelta(minutes=duration_minutes)
        if end.date() != lesson_date:
            raise ValidationException(
                "Lessons cannot span midnight",
                code="LESSON_SPANS_MIDNIGHT",
                details={"start_time": str(start_time), "duration_minutes": duration_minutes},
            )
        return end.time()

    def _release_stale_holds(
        self, instructor_id: str, lesson_date: date, start_time: time, now: datetime
    ) -> None:
        """Cancel expired PENDING lessons still occupying the unique slot index."""
        stale = self.repository.get_stale_pending_for_slot(
            instructor_id, lesson_date, start_time, ConflictChecker.hold_cutoff(now)
        )
        for lesson in stale:
            self._mark_cancelled(lesson, None, HOLD_EXPIRED_REASON, now)
        if stale:
            self.db.flush()
            self.logger.info(f"Released {len(stale)} expired holds on {lesson_date} {start_time}")

    @staticmethod
    def _mark_cancelled(
        lesson: Lesson, cancelled_by: Optional[Profile], reason: Optional[str], now: datetime
    ) -> None:
        lesson.status = LessonStatus.CANCELLED.value
        lesson.cancelled_at = now
        lesson.cancelled_by_id = cancelled_by.id if cancelled_by else None
        lesson.cancellation_reason = reason

    # ------------------------------------------------------------------ #
    # Reading
    # ------------------------------------------------------------------ #

    def _get(self, lesson_id: str) -> Lesson:
        lesson = self.repository.get_by_id(lesson_id)
        if lesson is None:
            raise NotFoundException(
                "Lesson not found", code="LESSON_NOT_FOUND", details={"lesson_id": lesson_id}
            )
        return lesson

    @staticmethod
    def _is_lesson_instructor(lesson: Lesson, user: Profile) -> bool:
        return lesson.instructor is not None and lesson.instructor.profile_id == user.id

    @BaseService.measure_operation("get_lesson")
    def get_lesson(self, lesson_id: str, user: Profile) -> Lesson:
        """
        Get a lesson visible to the user.

        Raises:
            NotFoundException: Unknown lesson
            ForbiddenException: User is neither participant nor admin
        """
        lesson = self._get(lesson_id)
        if lesson.student_id == user.id or self._is_lesson_instructor(lesson, user):
            return lesson
        if user.is_admin:
            return lesson
        raise ForbiddenException("You do not have access to this lesson")

    @BaseService.measure_operation("list_lessons")
    def list_lessons(
        self,
        user: Profile,
        status: Optional[str] = None,
        upcoming: bool = False,
        now: Optional[datetime] = None,
    ) -> List[Lesson]:
        now = now or utc_now()
        from_date = (now - timedelta(days=1)).date() if upcoming else None

        if user.is_instructor:
            instructor = self.instructor_repository.get_by_profile_id(user.id)
            if instructor is None:
                return []
            lessons = self.repository.list_for_instructor(instructor.id, status, from_date)
        else:
            lessons = self.repository.list_for_student(user.id, status, from_date)

        if upcoming:
            lessons = [lesson for lesson in lessons if lesson.is_upcoming(now)]
        return lessons

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def _require_transition(self, lesson: Lesson, target: str) -> None:
        if not lesson.can_transition_to(target):
            raise InvalidStatusTransitionException(lesson.status, target)

    @BaseService.measure_operation("cancel_lesson")
    def cancel_lesson(
        self,
        lesson_id: str,
        user: Profile,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Lesson:
        """
        Cancel a lesson and apply the refund policy.

        Refund policy:
        - PENDING: the open payment intent is cancelled
        - CONFIRMED, cancelled by the instructor (or support), or by the
          student at least full_refund_cutoff_hours before the start:
          full refund
        - CONFIRMED, cancelled by the student inside the cutoff: no refund

        Raises:
            ForbiddenException: User is not a participant of the lesson
            InvalidStatusTransitionException: Lesson is not PENDING or CONFIRMED
            BusinessRuleException: Lesson has already started
        """
        now = now or utc_now()
        lesson = self._get(lesson_id)
        by_student = lesson.student_id == user.id
        if not (by_student or self._is_lesson_instructor(lesson, user) or user.is_admin):
            raise ForbiddenException("You do not have access to this lesson")

        self._require_transition(lesson, LessonStatus.CANCELLED.value)
        if not lesson.is_upcoming(now):
            raise BusinessRuleException(
                "Lessons cannot be cancelled after they start", code="LESSON_ALREADY_STARTED"
            )

        refund_cents = 0
        payment_status = lesson.payment_status
        if lesson.status == LessonStatus.PENDING.value:
            if lesson.payment_intent_id:
                payment_status = self.stripe_service.cancel_payment_intent(
                    lesson.payment_intent_id
                )
        else:
            lead_hours = hours_until(
                lesson.lesson_date,
                lesson.start_time,
                get_location_timezone(lesson.location),
                now,
            )
            if not by_student or lead_hours >= settings.full_refund_cutoff_hours:
                refund = self.stripe_service.refund_payment(lesson)
                refund_cents = int(refund["amount"])
            else:
                self.logger.info(
                    f"Late cancellation of lesson {lesson.id} "
                    f"({lead_hours:.1f}h ahead) - no refund"
                )

        with self.transaction():
            self._mark_cancelled(lesson, user, reason, now)
            lesson.payment_status = payment_status
            self.db.flush()

        self.log_operation(
            "cancel_lesson", lesson_id=lesson.id, by=user.id, refund_cents=refund_cents
        )
        self.notification_service.send_lesson_cancelled(lesson, user, reason, refund_cents)
        return lesson

    def _get_for_instructor(self, lesson_id: str, user: Profile) -> Lesson:
        lesson = self._get(lesson_id)
        if not (self._is_lesson_instructor(lesson, user) or user.is_admin):
            raise ForbiddenException("Only the lesson's instructor can do this")
        return lesson

    @BaseService.measure_operation("complete_lesson")
    def complete_lesson(
        self, lesson_id: str, user: Profile, now: Optional[datetime] = None
    ) -> Lesson:
        now = now or utc_now()
        lesson = self._get_for_instructor(lesson_id, user)
        self._require_transition(lesson, LessonStatus.COMPLETED.value)
        if not lesson.has_ended(now):
            raise BusinessRuleException(
                "Lessons can be completed once they have ended", code="LESSON_NOT_ENDED"
            )

        with self.transaction():
            lesson.status = LessonStatus.COMPLETED.value
            lesson.completed_at = now
            self.db.flush()

        self.notification_service.send_review_request(lesson)
        return lesson

    @BaseService.measure_operation("mark_no_show")
    def mark_no_show(self, lesson_id: str, user: Profile, now: Optional[datetime] = None) -> Lesson:
        now = now or utc_now()
        lesson = self._get_for_instructor(lesson_id, user)
        self._require_transition(lesson, LessonStatus.NO_SHOW.value)
        if lesson.is_upcoming(now):
            raise BusinessRuleException(
                "A no-show can only be recorded after the start time", code="LESSON_NOT_STARTED"
            )

        with self.transaction():
            lesson.status = LessonStatus.NO_SHOW.value
            self.db.flush()
        self.log_operation("mark_no_show", lesson_id=lesson.id)
        return lesson

    @BaseService.measure_operation("retry_payment")
    def retry_payment(
        self, lesson_id: str, student: Profile, now: Optional[datetime] = None
    ) -> Tuple[Lesson, Dict[str, Any]]:
        """
        Return a usable payment intent for a PENDING lesson.

        The current intent is reused unless Stripe has cancelled it.

        Raises:
            ForbiddenException: Not the student's lesson
            BusinessRuleException: Lesson is not awaiting payment, or its hold expired
        """
        now = now or utc_now()
        lesson = self._get(lesson_id)
        if lesson.student_id != student.id:
            raise ForbiddenException("You do not have access to this lesson")
        if lesson.status != LessonStatus.PENDING.value:
            raise BusinessRuleException(
                "Lesson is not awaiting payment",
                code="LESSON_NOT_PENDING",
                details={"status": lesson.status},
            )
        if ensure_utc(lesson.created_at) < ConflictChecker.hold_cutoff(now):
            raise BusinessRuleException(
                "The payment window for this lesson has expired; please book again",
                code="PAYMENT_HOLD_EXPIRED",
            )

        intent: Optional[Dict[str, Any]] = None
        if lesson.payment_intent_id:
            intent = self.stripe_service.retrieve_payment_intent(lesson.payment_intent_id)
            if intent["status"] == "succeeded":
                raise BusinessRuleException(
                    "Payment already completed", code="PAYMENT_ALREADY_COMPLETED"
                )
            if intent["status"] == "canceled":
                intent = None

        if intent is None:
            intent = self.stripe_service.create_payment_intent(lesson, lesson.instructor)

        with self.transaction():
            self.stripe_service.record_payment_intent(lesson, intent)
        return lesson, intent

    # ------------------------------------------------------------------ #
    # Periodic jobs
    # ------------------------------------------------------------------ #

    @BaseService.measure_operation("expire_unpaid_lessons")
    def expire_unpaid_lessons(self, now: Optional[datetime] = None) -> int:
        """Cancel PENDING lessons whose payment hold has expired."""
        now = now or utc_now()
        stale = self.repository.get_stale_pending(ConflictChecker.hold_cutoff(now))
        expired = 0
        for lesson in stale:
            payment_status = lesson.payment_status
            if lesson.payment_intent_id:
                try:
                    payment_status = self.stripe_service.cancel_payment_intent(
                        lesson.payment_intent_id
                    )
                except ServiceException as e:
                    self.logger.error(f"Could not cancel intent for lesson {lesson.id}: {e}")
            with self.transaction():
                self._mark_cancelled(lesson, None, HOLD_EXPIRED_REASON, now)
                lesson.payment_status = payment_status
            expired += 1
        if expired:
            self.logger.info(f"Expired {expired} unpaid lessons")
        return expired

    @BaseService.measure_operation("send_lesson_reminders")
    def send_due_reminders(self, now: Optional[datetime] = None) -> int:
        """Remind both participants of CONFIRMED lessons starting soon."""
        now = now or utc_now()
        today = now.date()
        candidates = self.repository.get_confirmed_between_dates(
            today - timedelta(days=1), today + timedelta(days=2), unreminded_only=True
        )
        sent = 0
        lead = timedelta(hours=settings.reminder_lead_hours)
        for lesson in candidates:
            starts_at = lesson.start_utc()
            if not now < starts_at <= now + lead:
                continue
            self.notification_service.send_lesson_reminder(lesson)
            with self.transaction():
                lesson.reminder_sent_at = now
            sent += 1
        return sent

    @BaseService.measure_operation("complete_past_lessons")
    def complete_past_lessons(self, now: Optional[datetime] = None) -> int:
        """Mark CONFIRMED lessons as COMPLETED once they ended long enough ago."""
        now = now or utc_now()
        cutoff = now - timedelta(hours=settings.auto_complete_after_hours)
        candidates = self.repository.get_confirmed_on_or_before(cutoff.date() + timedelta(days=1))
        completed = 0
        for lesson in candidates:
            if lesson.end_utc() > cutoff:
                continue
            with self.transaction():
                lesson.status = LessonStatus.COMPLETED.value
                lesson.completed_at = now
            self.notification_service.send_review_request(lesson)
            completed += 1
        if completed:
            self.logger.info(f"Auto-completed {completed} lessons")
        return completed
