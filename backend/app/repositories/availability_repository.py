# backend/app/repositories/availability_repository.py
"""
Availability Repository for the Sideout Platform

Weekly windows and blackout dates. Windows are replaced wholesale when an
instructor saves their schedule.
"""

from datetime import date
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import InstructorAvailability, InstructorBlackout
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[InstructorAvailability]):
    """Repository for weekly availability windows and blackouts."""

    def __init__(self, db: Session):
        super().__init__(db, InstructorAvailability)
        self.logger = logging.getLogger(__name__)

    def get_windows(self, instructor_id: str) -> List[InstructorAvailability]:
        try:
            return (
                self.db.query(InstructorAvailability)
                .filter(InstructorAvailability.instructor_id == instructor_id)
                .order_by(InstructorAvailability.day_of_week, InstructorAvailability.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting windows for {instructor_id}: {str(e)}")
            raise RepositoryException(f"Failed to get availability: {str(e)}")

    def get_windows_for_day(
        self, instructor_id: str, day_of_week: int
    ) -> List[InstructorAvailability]:
        try:
            return (
                self.db.query(InstructorAvailability)
                .filter(
                    InstructorAvailability.instructor_id == instructor_id,
                    InstructorAvailability.day_of_week == day_of_week,
                )
                .order_by(InstructorAvailability.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting day windows for {instructor_id}: {str(e)}")
            raise RepositoryException(f"Failed to get availability: {str(e)}")

    def replace_windows(
        self, instructor_id: str, windows: List[Dict[str, Any]]
    ) -> List[InstructorAvailability]:
        """Delete all existing windows and insert the given ones."""
        try:
            self.db.query(InstructorAvailability).filter(
                InstructorAvailability.instructor_id == instructor_id
            ).delete(synchronize_session="fetch")
            created = [
                InstructorAvailability(instructor_id=instructor_id, **window) for window in windows
            ]
            self.db.add_all(created)
            self.db.flush()
            return created
        except SQLAlchemyError as e:
            self.logger.error(f"Error replacing windows for {instructor_id}: {str(e)}")
            raise RepositoryException(f"Failed to save availability: {str(e)}")

    # Blackouts

    def get_blackout(self, instructor_id: str, blackout_date: date) -> Optional[InstructorBlackout]:
        try:
            return (
                self.db.query(InstructorBlackout)
                .filter(
                    InstructorBlackout.instructor_id == instructor_id,
                    InstructorBlackout.blackout_date == blackout_date,
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting blackout: {str(e)}")
            raise RepositoryException(f"Failed to get blackout: {str(e)}")

    def is_blacked_out(self, instructor_id: str, blackout_date: date) -> bool:
        return self.get_blackout(instructor_id, blackout_date) is not None

    def list_blackouts(
        self, instructor_id: str, from_date: Optional[date] = None
    ) -> List[InstructorBlackout]:
        try:
            query = self.db.query(InstructorBlackout).filter(
                InstructorBlackout.instructor_id == instructor_id
            )
            if from_date:
                query = query.filter(InstructorBlackout.blackout_date >= from_date)
            return query.order_by(InstructorBlackout.blackout_date).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing blackouts: {str(e)}")
            raise RepositoryException(f"Failed to list blackouts: {str(e)}")

    def add_blackout(
        self, instructor_id: str, blackout_date: date, reason: Optional[str] = None
    ) -> InstructorBlackout:
        try:
            blackout = InstructorBlackout(
                instructor_id=instructor_id, blackout_date=blackout_date, reason=reason
            )
            self.db.add(blackout)
            self.db.flush()
            return blackout
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Error adding blackout: {str(e)}")
            raise RepositoryException(f"Failed to add blackout: {str(e)}")

    def delete_blackout(self, instructor_id: str, blackout_date: date) -> bool:
        try:
            deleted = (
                self.db.query(InstructorBlackout)
                .filter(
                    InstructorBlackout.instructor_id == instructor_id,
                    InstructorBlackout.blackout_date == blackout_date,
                )
                .delete(synchronize_session="fetch")
            )
            self.db.flush()
            return deleted > 0
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting blackout: {str(e)}")
            raise RepositoryException(f"Failed to delete blackout: {str(e)}")
