# backend/app/repositories/instructor_repository.py
"""
Instructor Repository for the Sideout Platform

Data access for instructor coaching profiles, including the public search
used by the instructor directory.
"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.availability import InstructorAvailability
from ..models.instructor import Instructor
from ..models.profile import Profile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class InstructorRepository(BaseRepository[Instructor]):
    """Repository for Instructor data access."""

    def __init__(self, db: Session):
        super().__init__(db, Instructor)
        self.logger = logging.getLogger(__name__)

    def get_with_details(self, instructor_id: str) -> Optional[Instructor]:
        """Get an instructor with profile and availability windows loaded."""
        try:
            return (
                self.db.query(Instructor)
                .options(selectinload(Instructor.availability_windows))
                .filter(Instructor.id == instructor_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting instructor {instructor_id}: {str(e)}")
            raise RepositoryException(f"Failed to get instructor: {str(e)}")

    def get_by_profile_id(self, profile_id: str) -> Optional[Instructor]:
        try:
            return self.db.query(Instructor).filter(Instructor.profile_id == profile_id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting instructor for profile {profile_id}: {str(e)}")
            raise RepositoryException(f"Failed to get instructor: {str(e)}")

    def search(
        self,
        *,
        location_id: Optional[str] = None,
        max_rate_cents: Optional[int] = None,
        min_rating: Optional[float] = None,
        verified_only: bool = False,
    ) -> List[Instructor]:
        """
        Find instructors open to new students.

        Results are ordered by rating (unrated last) then review count.
        Skill level filtering happens in the service since skill levels are
        stored as a JSON list.
        """
        try:
            query = (
                self.db.query(Instructor)
                .join(Profile, Instructor.profile_id == Profile.id)
                .filter(
                    Instructor.is_accepting_students.is_(True),
                    Profile.is_active.is_(True),
                )
            )
            if verified_only:
                query = query.filter(Instructor.is_verified.is_(True))
            if max_rate_cents is not None:
                query = query.filter(Instructor.hourly_rate_cents <= max_rate_cents)
            if min_rating is not None:
                query = query.filter(Instructor.rating_average >= min_rating)
            if location_id:
                teaches_here = (
                    self.db.query(InstructorAvailability.id)
                    .filter(
                        InstructorAvailability.instructor_id == Instructor.id,
                        InstructorAvailability.location_id == location_id,
                    )
                    .exists()
                )
                query = query.filter(teaches_here)

            return query.order_by(
                func.coalesce(Instructor.rating_average, 0).desc(),
                Instructor.review_count.desc(),
                Instructor.created_at,
            ).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error searching instructors: {str(e)}")
            raise RepositoryException(f"Failed to search instructors: {str(e)}")

    def update_rating_aggregate(
        self, instructor_id: str, rating_average: Optional[float], review_count: int
    ) -> None:
        try:
            self.db.query(Instructor).filter(Instructor.id == instructor_id).update(
                {"rating_average": rating_average, "review_count": review_count},
                synchronize_session="fetch",
            )
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating rating for {instructor_id}: {str(e)}")
            raise RepositoryException(f"Failed to update rating aggregate: {str(e)}")
