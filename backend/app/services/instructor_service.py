# backend/app/services/instructor_service.py
"""
Instructor Service Layer

Handles business logic for instructor coaching profiles: the public
directory, profile creation and updates, admin verification and the
denormalized rating aggregate.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import BusinessRuleException, ConflictException, NotFoundException
from ..models.instructor import Instructor
from ..models.profile import Profile
from ..repositories.factory import RepositoryFactory
from ..repositories.instructor_repository import InstructorRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class InstructorService(BaseService):
    """
    Service layer for instructor-related operations.

    Centralizes business logic and ensures proper handling of:
    - Directory search and pagination
    - One coaching profile per account
    - Rating aggregates kept in sync with visible reviews
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[InstructorRepository] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_instructor_repository(db)
        self.review_repository = RepositoryFactory.create_review_repository(db)

    @BaseService.measure_operation("list_instructors")
    def list_instructors(
        self,
        *,
        skill_level: Optional[str] = None,
        location_id: Optional[str] = None,
        max_rate_cents: Optional[int] = None,
        min_rating: Optional[float] = None,
        verified_only: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[Instructor], int]:
        """
        Search the instructor directory.

        Returns:
            Tuple of (instructors on the requested page, total matches)
        """
        instructors = self.repository.search(
            location_id=location_id,
            max_rate_cents=max_rate_cents,
            min_rating=min_rating,
            verified_only=verified_only,
        )
        if skill_level:
            instructors = [i for i in instructors if skill_level in (i.skill_levels or [])]

        total = len(instructors)
        start = (page - 1) * per_page
        return instructors[start : start + per_page], total

    @BaseService.measure_operation("get_instructor")
    def get_instructor(self, instructor_id: str) -> Instructor:
        instructor = self.repository.get_with_details(instructor_id)
        if instructor is None:
            raise NotFoundException(
                "Instructor not found",
                code="INSTRUCTOR_NOT_FOUND",
                details={"instructor_id": instructor_id},
            )
        return instructor

    def get_for_profile(self, profile: Profile) -> Instructor:
        instructor = self.repository.get_by_profile_id(profile.id)
        if instructor is None:
            raise NotFoundException(
                "Instructor profile not found",
                code="INSTRUCTOR_PROFILE_MISSING",
            )
        return instructor

    @BaseService.measure_operation("create_instructor_profile")
    def create_profile(self, profile: Profile, data: Dict[str, Any]) -> Instructor:
        """
        Create the coaching profile for an instructor account.

        Raises:
            BusinessRuleException: Account does not have the instructor role
            ConflictException: A coaching profile already exists
        """
        if not profile.is_instructor:
            raise BusinessRuleException(
                "Only instructor accounts can create a coaching profile",
                code="NOT_AN_INSTRUCTOR",
            )
        if self.repository.get_by_profile_id(profile.id):
            raise ConflictException(
                "Instructor profile already exists", code="INSTRUCTOR_PROFILE_EXISTS"
            )

        try:
            with self.transaction():
                instructor = self.repository.create(profile_id=profile.id, **data)
        except IntegrityError:
            raise ConflictException(
                "Instructor profile already exists", code="INSTRUCTOR_PROFILE_EXISTS"
            )

        self.log_operation("create_instructor_profile", instructor_id=instructor.id)
        return instructor

    @BaseService.measure_operation("update_instructor_profile")
    def update_profile(self, profile: Profile, updates: Dict[str, Any]) -> Instructor:
        instructor = self.get_for_profile(profile)
        with self.transaction():
            for key, value in updates.items():
                setattr(instructor, key, value)
            self.db.flush()
        self.log_operation(
            "update_instructor_profile", instructor_id=instructor.id, fields=list(updates)
        )
        return instructor

    @BaseService.measure_operation("verify_instructor")
    def verify_instructor(self, instructor_id: str, verified: bool) -> Instructor:
        instructor = self.get_instructor(instructor_id)
        with self.transaction():
            instructor.is_verified = verified
            self.db.flush()
        self.logger.info(f"Instructor {instructor_id} verification set to {verified}")
        return instructor

    def refresh_rating(self, instructor_id: str) -> None:
        """
        Recompute rating_average and review_count from visible reviews.

        Runs inside the caller's transaction.
        """
        aggregate = self.review_repository.get_instructor_aggregates(instructor_id)
        raw_average = aggregate["raw_average"]
        self.repository.update_rating_aggregate(
            instructor_id,
            round(raw_average, 2) if raw_average is not None else None,
            aggregate["total_reviews"],
        )
