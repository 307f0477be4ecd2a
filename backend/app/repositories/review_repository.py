# backend/app/repositories/review_repository.py
"""
Repositories for reviews/ratings system.

Follows repository pattern: no business logic, DB-only operations.
Only visible reviews count toward aggregates.
"""

import logging
from typing import Dict, List, Optional, TypedDict

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException
from ..models.review import Review, ReviewResponse
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class InstructorAggregate(TypedDict):
    total_reviews: int
    raw_average: Optional[float]


class ReviewRepository(BaseRepository[Review]):
    """Data access for `Review`."""

    def __init__(self, db: Session):
        super().__init__(db, Review)
        self.logger = logging.getLogger(__name__)

    def exists_for_lesson(self, lesson_id: str) -> bool:
        try:
            match = self.db.query(Review.id).filter(Review.lesson_id == lesson_id).first()
            return match is not None
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking review for lesson {lesson_id}: {e}")
            raise RepositoryException(f"Failed to check review existence: {e}")

    def get_by_lesson_id(self, lesson_id: str) -> Optional[Review]:
        try:
            return self.db.query(Review).filter(Review.lesson_id == lesson_id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting review for lesson {lesson_id}: {e}")
            raise RepositoryException(f"Failed to get review: {e}")

    def get_reviewed_lesson_ids(self, lesson_ids: List[str]) -> List[str]:
        if not lesson_ids:
            return []
        try:
            rows = self.db.query(Review.lesson_id).filter(Review.lesson_id.in_(lesson_ids)).all()
            return [row[0] for row in rows]
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting reviewed lessons: {e}")
            raise RepositoryException(f"Failed to get reviewed lessons: {e}")

    def get_instructor_aggregates(self, instructor_id: str) -> InstructorAggregate:
        try:
            row = (
                self.db.query(
                    func.count(Review.id).label("total_reviews"),
                    func.avg(Review.rating * 1.0).label("raw_average"),
                )
                .filter(Review.instructor_id == instructor_id, Review.is_visible.is_(True))
                .one()
            )
            return {
                "total_reviews": int(row.total_reviews or 0),
                "raw_average": float(row.raw_average) if row.raw_average is not None else None,
            }
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting aggregates for {instructor_id}: {e}")
            raise RepositoryException(f"Failed to get review aggregates: {e}")

    def get_rating_distribution(self, instructor_id: str) -> Dict[int, int]:
        try:
            rows = (
                self.db.query(Review.rating, func.count(Review.id))
                .filter(Review.instructor_id == instructor_id, Review.is_visible.is_(True))
                .group_by(Review.rating)
                .all()
            )
            return {int(rating): int(count) for rating, count in rows}
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting rating distribution for {instructor_id}: {e}")
            raise RepositoryException(f"Failed to get rating distribution: {e}")

    def _visible_query(self, instructor_id: str, min_rating: Optional[int]) -> Query:
        q = self.db.query(Review).filter(
            Review.instructor_id == instructor_id, Review.is_visible.is_(True)
        )
        if min_rating is not None:
            q = q.filter(Review.rating >= min_rating)
        return q

    def list_visible_for_instructor(
        self, instructor_id: str, skip: int = 0, limit: int = 20, min_rating: Optional[int] = None
    ) -> List[Review]:
        try:
            return (
                self._visible_query(instructor_id, min_rating)
                .order_by(Review.created_at.desc(), Review.id.desc())
                .offset(skip)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing reviews for {instructor_id}: {e}")
            raise RepositoryException(f"Failed to list reviews: {e}")

    def count_visible_for_instructor(
        self, instructor_id: str, min_rating: Optional[int] = None
    ) -> int:
        try:
            return self._visible_query(instructor_id, min_rating).count()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting reviews for {instructor_id}: {e}")
            raise RepositoryException(f"Failed to count reviews: {e}")


class ReviewResponseRepository(BaseRepository[ReviewResponse]):
    """Data access for `ReviewResponse`."""

    def __init__(self, db: Session):
        super().__init__(db, ReviewResponse)
        self.logger = logging.getLogger(__name__)

    def exists_for_review(self, review_id: str) -> bool:
        try:
            return (
                self.db.query(ReviewResponse.id)
                .filter(ReviewResponse.review_id == review_id)
                .first()
                is not None
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking response for review {review_id}: {e}")
            raise RepositoryException(f"Failed to check response existence: {e}")
