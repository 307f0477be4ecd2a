# backend/app/services/review_service.py
"""
ReviewService: business logic for reviews/ratings.

Implements:
- Eligibility and submission (one per lesson, within the review window)
- Instructor rating aggregate refresh on every change
- Public listing and rating summary
- Instructor response (one per review) with ownership enforcement
- Admin moderation (hide/unhide)
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import (
    REVIEW_COMMENT_MAX_LENGTH,
    REVIEW_COMMENT_MIN_LENGTH,
    REVIEW_RESPONSE_MAX_LENGTH,
)
from ..core.enums import LessonStatus
from ..core.exceptions import (
    BusinessRuleException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc, utc_now
from ..models.instructor import Instructor
from ..models.profile import Profile
from ..models.review import Review, ReviewResponse
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .instructor_service import InstructorService


class ReviewService(BaseService):
    def __init__(self, db: Session, instructor_service: Optional[InstructorService] = None):
        super().__init__(db)
        self.repository = RepositoryFactory.create_review_repository(db)
        self.response_repository = RepositoryFactory.create_review_response_repository(db)
        self.lesson_repository = RepositoryFactory.create_lesson_repository(db)
        self.instructor_repository = RepositoryFactory.create_instructor_repository(db)
        self.instructor_service = instructor_service or InstructorService(db)

    @staticmethod
    def _clean_comment(comment: Optional[str]) -> Optional[str]:
        if comment is None:
            return None
        text = comment.strip()
        if not text:
            return None
        if len(text) < REVIEW_COMMENT_MIN_LENGTH:
            raise ValidationException("Review text too short")
        if len(text) > REVIEW_COMMENT_MAX_LENGTH:
            raise ValidationException(
                f"Review text cannot exceed {REVIEW_COMMENT_MAX_LENGTH} characters"
            )
        return text

    @BaseService.measure_operation("submit_review")
    def submit_review(
        self,
        *,
        student: Profile,
        lesson_id: str,
        rating: int,
        comment: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Review:
        """Submit a review for a completed lesson."""
        if rating is None or rating < 1 or rating > 5:
            raise ValidationException("Rating must be an integer between 1 and 5")
        comment = self._clean_comment(comment)

        lesson = self.lesson_repository.get_by_id(lesson_id)
        if not lesson:
            raise NotFoundException("Lesson not found", code="LESSON_NOT_FOUND")

        # Eligibility
        if lesson.student_id != student.id:
            raise ForbiddenException("You can only review your own lessons")
        if lesson.status == LessonStatus.NO_SHOW.value:
            raise BusinessRuleException(
                "Cannot review a lesson you did not attend. "
                "This lesson was marked as a no-show.",
                code="LESSON_NO_SHOW",
            )
        if lesson.status != LessonStatus.COMPLETED.value:
            raise BusinessRuleException(
                "Only completed lessons can be reviewed", code="LESSON_NOT_COMPLETED"
            )

        completed_at = ensure_utc(lesson.completed_at) or lesson.end_utc()
        now = now or utc_now()
        if now > completed_at + timedelta(days=settings.review_window_days):
            raise BusinessRuleException("Review window has expired", code="REVIEW_WINDOW_EXPIRED")

        if self.repository.exists_for_lesson(lesson_id):
            raise ConflictException(
                "Review already submitted for this lesson", code="REVIEW_EXISTS"
            )

        try:
            with self.transaction():
                review = self.repository.create(
                    lesson_id=lesson.id,
                    student_id=student.id,
                    instructor_id=lesson.instructor_id,
                    rating=rating,
                    comment=comment,
                    is_visible=True,
                )
                self.instructor_service.refresh_rating(lesson.instructor_id)
        except IntegrityError:
            raise ConflictException(
                "Review already submitted for this lesson", code="REVIEW_EXISTS"
            )

        self.log_operation("submit_review", review_id=review.id, rating=rating)
        return review

    @BaseService.measure_operation("list_instructor_reviews")
    def list_instructor_reviews(
        self,
        instructor_id: str,
        page: int = 1,
        per_page: int = 20,
        min_rating: Optional[int] = None,
    ) -> Tuple[List[Review], int]:
        self._get_instructor(instructor_id)
        skip = (page - 1) * per_page
        reviews = self.repository.list_visible_for_instructor(
            instructor_id, skip=skip, limit=per_page, min_rating=min_rating
        )
        total = self.repository.count_visible_for_instructor(instructor_id, min_rating=min_rating)
        return reviews, total

    @BaseService.measure_operation("get_rating_summary")
    def get_rating_summary(self, instructor_id: str) -> Dict[str, Any]:
        self._get_instructor(instructor_id)
        aggregate = self.repository.get_instructor_aggregates(instructor_id)
        counts = self.repository.get_rating_distribution(instructor_id)
        raw_average = aggregate["raw_average"]
        return {
            "instructor_id": instructor_id,
            "rating_average": round(raw_average, 2) if raw_average is not None else None,
            "review_count": aggregate["total_reviews"],
            "distribution": {str(star): counts.get(star, 0) for star in range(1, 6)},
        }

    @BaseService.measure_operation("respond_to_review")
    def respond_to_review(
        self, *, review_id: str, instructor: Instructor, response_text: str
    ) -> ReviewResponse:
        if not response_text or not response_text.strip():
            raise ValidationException("Response text cannot be empty")
        if len(response_text.strip()) > REVIEW_RESPONSE_MAX_LENGTH:
            raise ValidationException(
                f"Response text cannot exceed {REVIEW_RESPONSE_MAX_LENGTH} characters"
            )

        review = self.repository.get_by_id(review_id)
        if not review:
            raise NotFoundException("Review not found", code="REVIEW_NOT_FOUND")
        if review.instructor_id != instructor.id:
            raise ForbiddenException("You can only respond to reviews of your own lessons")
        if self.response_repository.exists_for_review(review_id):
            raise ConflictException(
                "Response already submitted for this review", code="RESPONSE_EXISTS"
            )

        try:
            with self.transaction():
                response = self.response_repository.create(
                    review_id=review_id,
                    instructor_id=instructor.id,
                    response_text=response_text.strip(),
                )
        except IntegrityError:
            raise ConflictException(
                "Response already submitted for this review", code="RESPONSE_EXISTS"
            )
        return response

    @BaseService.measure_operation("set_review_visibility")
    def set_visibility(self, review_id: str, is_visible: bool) -> Review:
        """Hide or restore a review; hidden reviews drop out of the aggregate."""
        review = self.repository.get_by_id(review_id)
        if not review:
            raise NotFoundException("Review not found", code="REVIEW_NOT_FOUND")

        with self.transaction():
            review.is_visible = is_visible
            self.db.flush()
            self.instructor_service.refresh_rating(review.instructor_id)

        self.logger.info(f"Review {review_id} visibility set to {is_visible}")
        return review

    # --------- Helpers ---------
    def _get_instructor(self, instructor_id: str) -> Instructor:
        instructor = self.instructor_repository.get_by_id(instructor_id)
        if instructor is None:
            raise NotFoundException("Instructor not found", code="INSTRUCTOR_NOT_FOUND")
        return instructor

    @staticmethod
    def reviewer_display_name(review: Review) -> Optional[str]:
        return review.student.display_name if review.student else None
