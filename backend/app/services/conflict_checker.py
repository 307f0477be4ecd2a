# backend/app/services/conflict_checker.py
"""
Conflict Checker Service for the Sideout Platform

Handles lesson conflict detection and booking time rules:
- Overlap checks against an instructor's or a student's live lessons
- Minimum notice and maximum advance horizon

Overlap is tested on the lesson's own fields (date, start_time, end_time).
The partial unique index on lessons remains the final guard against two
concurrent bookings of the same slot.
"""

from datetime import date, datetime, time, timedelta
import logging
from typing import List, Optional

import pytz
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import BusinessRuleException, InsufficientNoticeException
from ..core.timezone_utils import hours_until, utc_now
from ..models.lesson import Lesson
from ..repositories import RepositoryFactory
from ..repositories.lesson_repository import LessonRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Half-open interval overlap: touching lessons do not conflict."""
    return start_a < end_b and end_a > start_b


class ConflictChecker(BaseService):
    """
    Service for checking lesson conflicts and time validation.
    """

    def __init__(self, db: Session, repository: Optional[LessonRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_lesson_repository(db)

    @staticmethod
    def hold_cutoff(now: Optional[datetime] = None) -> datetime:
        """PENDING lessons created before this moment no longer hold their slot."""
        return (now or utc_now()) - timedelta(minutes=settings.payment_hold_minutes)

    @BaseService.measure_operation("check_instructor_conflicts")
    def check_instructor_conflicts(
        self,
        instructor_id: str,
        lesson_date: date,
        start_time: time,
        end_time: time,
        exclude_lesson_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[Lesson]:
        """
        Live lessons of the instructor overlapping the given range.

        Args:
            instructor_id: The instructor to check
            lesson_date: The date to check
            start_time: Start of the range
            end_time: End of the range
            exclude_lesson_id: Optional lesson to ignore
            now: Reference time for the payment hold

        Returns:
            Overlapping lessons, empty when the range is free
        """
        lessons = self.repository.get_live_for_instructor_on_date(
            instructor_id, lesson_date, self.hold_cutoff(now), exclude_lesson_id
        )
        conflicts = [
            lesson
            for lesson in lessons
            if overlaps(start_time, end_time, lesson.start_time, lesson.end_time)
        ]
        if conflicts:
            self.logger.warning(
                f"Found {len(conflicts)} lesson conflicts for instructor {instructor_id} "
                f"on {lesson_date} between {start_time}-{end_time}"
            )
        return conflicts

    @BaseService.measure_operation("check_student_conflicts")
    def check_student_conflicts(
        self,
        student_id: str,
        lesson_date: date,
        start_time: time,
        end_time: time,
        exclude_lesson_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[Lesson]:
        lessons = self.repository.get_live_for_student_on_date(
            student_id, lesson_date, self.hold_cutoff(now), exclude_lesson_id
        )
        return [
            lesson
            for lesson in lessons
            if overlaps(start_time, end_time, lesson.start_time, lesson.end_time)
        ]

    @staticmethod
    def timing_allows(
        lesson_date: date,
        start_time: time,
        tz: pytz.BaseTzInfo,
        now: Optional[datetime] = None,
    ) -> bool:
        """Non-raising form of validate_timing, used when listing open slots."""
        lead_hours = hours_until(lesson_date, start_time, tz, now)
        if lead_hours < settings.min_booking_notice_hours:
            return False
        return lead_hours <= settings.max_booking_advance_days * 24

    @BaseService.measure_operation("validate_timing")
    def validate_timing(
        self,
        lesson_date: date,
        start_time: time,
        tz: pytz.BaseTzInfo,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Enforce the minimum notice and the advance booking horizon.

        Raises:
            InsufficientNoticeException: Lesson starts too soon (or is in the past)
            BusinessRuleException: Lesson is beyond the advance horizon
        """
        lead_hours = hours_until(lesson_date, start_time, tz, now)
        if lead_hours < settings.min_booking_notice_hours:
            raise InsufficientNoticeException(
                required_hours=settings.min_booking_notice_hours,
                provided_hours=max(0.0, lead_hours),
            )
        if lead_hours > settings.max_booking_advance_days * 24:
            raise BusinessRuleException(
                f"Lessons can be booked at most {settings.max_booking_advance_days} days ahead",
                code="BEYOND_BOOKING_HORIZON",
                details={"max_advance_days": settings.max_booking_advance_days},
            )
