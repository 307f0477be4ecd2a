# backend/app/services/dashboard_service.py
"""
Dashboard Service for the Sideout Platform

Read-only summaries for the student and instructor home screens.
"""

from datetime import datetime
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.enums import LessonStatus
from ..core.timezone_utils import utc_now
from ..models.instructor import Instructor
from ..models.profile import Profile
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

RECENT_LESSON_LIMIT = 5


class DashboardService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.lesson_repository = RepositoryFactory.create_lesson_repository(db)

    @BaseService.measure_operation("student_dashboard")
    def get_student_dashboard(
        self, student: Profile, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        now = now or utc_now()
        lessons = self.lesson_repository.list_for_student(student.id)

        upcoming = [
            lesson
            for lesson in lessons
            if lesson.status in (LessonStatus.PENDING.value, LessonStatus.CONFIRMED.value)
            and lesson.is_upcoming(now)
        ]
        past = [
            lesson
            for lesson in lessons
            if lesson.status in (LessonStatus.COMPLETED.value, LessonStatus.NO_SHOW.value)
        ]
        past.sort(key=lambda lesson: (lesson.lesson_date, lesson.start_time), reverse=True)

        return {
            "upcoming_lessons": upcoming,
            "recent_lessons": past[:RECENT_LESSON_LIMIT],
            "awaiting_review": self.lesson_repository.get_completed_without_review(student.id),
        }

    @BaseService.measure_operation("instructor_dashboard")
    def get_instructor_dashboard(
        self, instructor: Instructor, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        now = now or utc_now()
        upcoming = [
            lesson
            for lesson in self.lesson_repository.list_for_instructor(
                instructor.id, status=LessonStatus.CONFIRMED.value
            )
            if lesson.is_upcoming(now)
        ]
        counts = self.lesson_repository.count_by_status_for_instructor(instructor.id)

        return {
            "instructor_id": instructor.id,
            "upcoming_lessons": upcoming,
            "lesson_counts": {status.value: counts.get(status.value, 0) for status in LessonStatus},
            "earnings_cents": self.lesson_repository.sum_completed_earnings(instructor.id),
            "rating_average": instructor.rating_average,
            "review_count": instructor.review_count,
        }
