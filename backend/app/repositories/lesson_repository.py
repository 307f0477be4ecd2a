# backend/app/repositories/lesson_repository.py
"""
Lesson Repository for the Sideout Platform

All lesson queries live here, including the "live lesson" filter used for
conflict detection: a lesson occupies its slot when it is CONFIRMED, or
PENDING and created inside the payment hold window.
"""

from datetime import date, datetime, time
import logging
from typing import Dict, List, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.enums import LessonStatus
from ..core.exceptions import RepositoryException
from ..models.lesson import Lesson
from ..models.review import Review
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class LessonRepository(BaseRepository[Lesson]):
    """Repository for Lesson data access."""

    def __init__(self, db: Session):
        super().__init__(db, Lesson)
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def _live_filter(hold_cutoff: datetime):
        return or_(
            Lesson.status == LessonStatus.CONFIRMED.value,
            and_(
                Lesson.status == LessonStatus.PENDING.value,
                Lesson.created_at >= hold_cutoff,
            ),
        )

    # Conflict queries

    def get_live_for_instructor_on_date(
        self,
        instructor_id: str,
        lesson_date: date,
        hold_cutoff: datetime,
        exclude_lesson_id: Optional[str] = None,
    ) -> List[Lesson]:
        """Live lessons an instructor has on a date, ordered by start time."""
        try:
            query = self.db.query(Lesson).filter(
                Lesson.instructor_id == instructor_id,
                Lesson.lesson_date == lesson_date,
                self._live_filter(hold_cutoff),
            )
            if exclude_lesson_id:
                query = query.filter(Lesson.id != exclude_lesson_id)
            return query.order_by(Lesson.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting instructor lessons for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict lessons: {str(e)}")

    def get_live_for_student_on_date(
        self,
        student_id: str,
        lesson_date: date,
        hold_cutoff: datetime,
        exclude_lesson_id: Optional[str] = None,
    ) -> List[Lesson]:
        try:
            query = self.db.query(Lesson).filter(
                Lesson.student_id == student_id,
                Lesson.lesson_date == lesson_date,
                self._live_filter(hold_cutoff),
            )
            if exclude_lesson_id:
                query = query.filter(Lesson.id != exclude_lesson_id)
            return query.order_by(Lesson.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting student lessons for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict lessons: {str(e)}")

    def get_stale_pending_for_slot(
        self, instructor_id: str, lesson_date: date, start_time: time, hold_cutoff: datetime
    ) -> List[Lesson]:
        """PENDING lessons past the hold that still sit in the unique slot index."""
        try:
            return (
                self.db.query(Lesson)
                .filter(
                    Lesson.instructor_id == instructor_id,
                    Lesson.lesson_date == lesson_date,
                    Lesson.start_time == start_time,
                    Lesson.status == LessonStatus.PENDING.value,
                    Lesson.created_at < hold_cutoff,
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting stale pending lessons: {str(e)}")
            raise RepositoryException(f"Failed to get stale lessons: {str(e)}")

    # Listing

    def _for_participant(
        self, column, participant_id: str, status: Optional[str], from_date: Optional[date]
    ) -> Query:
        query = self.db.query(Lesson).filter(column == participant_id)
        if status:
            query = query.filter(Lesson.status == status)
        if from_date:
            query = query.filter(Lesson.lesson_date >= from_date)
        return query

    def list_for_student(
        self,
        student_id: str,
        status: Optional[str] = None,
        from_date: Optional[date] = None,
    ) -> List[Lesson]:
        try:
            query = self._for_participant(Lesson.student_id, student_id, status, from_date)
            return query.order_by(Lesson.lesson_date, Lesson.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing student lessons: {str(e)}")
            raise RepositoryException(f"Failed to list lessons: {str(e)}")

    def list_for_instructor(
        self,
        instructor_id: str,
        status: Optional[str] = None,
        from_date: Optional[date] = None,
    ) -> List[Lesson]:
        try:
            query = self._for_participant(Lesson.instructor_id, instructor_id, status, from_date)
            return query.order_by(Lesson.lesson_date, Lesson.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing instructor lessons: {str(e)}")
            raise RepositoryException(f"Failed to list lessons: {str(e)}")

    def get_by_payment_intent_id(self, payment_intent_id: str) -> Optional[Lesson]:
        try:
            return (
                self.db.query(Lesson).filter(Lesson.payment_intent_id == payment_intent_id).first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting lesson by intent {payment_intent_id}: {str(e)}")
            raise RepositoryException(f"Failed to get lesson: {str(e)}")

    def get_completed_without_review(self, student_id: str) -> List[Lesson]:
        try:
            return (
                self.db.query(Lesson)
                .outerjoin(Review, Review.lesson_id == Lesson.id)
                .filter(
                    Lesson.student_id == student_id,
                    Lesson.status == LessonStatus.COMPLETED.value,
                    Review.id.is_(None),
                )
                .order_by(Lesson.completed_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting unreviewed lessons: {str(e)}")
            raise RepositoryException(f"Failed to get unreviewed lessons: {str(e)}")

    # Instructor statistics

    def count_by_status_for_instructor(self, instructor_id: str) -> Dict[str, int]:
        try:
            rows = (
                self.db.query(Lesson.status, func.count(Lesson.id))
                .filter(Lesson.instructor_id == instructor_id)
                .group_by(Lesson.status)
                .all()
            )
            return {status: count for status, count in rows}
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting lessons by status: {str(e)}")
            raise RepositoryException(f"Failed to count lessons: {str(e)}")

    def sum_completed_earnings(self, instructor_id: str) -> int:
        """Sum of price minus platform fee across completed lessons, in cents."""
        query = self.db.query(
            func.coalesce(func.sum(Lesson.price_cents - Lesson.platform_fee_cents), 0)
        ).filter(
            Lesson.instructor_id == instructor_id,
            Lesson.status == LessonStatus.COMPLETED.value,
        )
        return int(self._execute_scalar(query) or 0)

    # Background job queries

    def get_stale_pending(self, hold_cutoff: datetime) -> List[Lesson]:
        try:
            return (
                self.db.query(Lesson)
                .filter(
                    Lesson.status == LessonStatus.PENDING.value,
                    Lesson.created_at < hold_cutoff,
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting stale pending lessons: {str(e)}")
            raise RepositoryException(f"Failed to get stale lessons: {str(e)}")

    def get_confirmed_between_dates(
        self, start_date: date, end_date: date, unreminded_only: bool = False
    ) -> List[Lesson]:
        """CONFIRMED lessons dated within [start_date, end_date]."""
        try:
            query = self.db.query(Lesson).filter(
                Lesson.status == LessonStatus.CONFIRMED.value,
                Lesson.lesson_date >= start_date,
                Lesson.lesson_date <= end_date,
            )
            if unreminded_only:
                query = query.filter(Lesson.reminder_sent_at.is_(None))
            return query.order_by(Lesson.lesson_date, Lesson.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting confirmed lessons: {str(e)}")
            raise RepositoryException(f"Failed to get confirmed lessons: {str(e)}")

    def get_confirmed_on_or_before(self, last_date: date) -> List[Lesson]:
        try:
            return (
                self.db.query(Lesson)
                .filter(
                    Lesson.status == LessonStatus.CONFIRMED.value,
                    Lesson.lesson_date <= last_date,
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting past confirmed lessons: {str(e)}")
            raise RepositoryException(f"Failed to get past lessons: {str(e)}")
