# backend/app/repositories/location_repository.py
"""
Location Repository for the Sideout Platform
"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.location import Location
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class LocationRepository(BaseRepository[Location]):
    """Repository for beach locations."""

    def __init__(self, db: Session):
        super().__init__(db, Location)
        self.logger = logging.getLogger(__name__)

    def list_locations(
        self, city: Optional[str] = None, include_inactive: bool = False
    ) -> List[Location]:
        """List locations ordered by city and name."""
        try:
            query = self.db.query(Location)
            if not include_inactive:
                query = query.filter(Location.is_active.is_(True))
            if city:
                query = query.filter(func.lower(Location.city) == city.strip().lower())
            return query.order_by(Location.city, Location.name).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing locations: {str(e)}")
            raise RepositoryException(f"Failed to list locations: {str(e)}")

    def get_active(self, location_id: str) -> Optional[Location]:
        try:
            return (
                self.db.query(Location)
                .filter(Location.id == location_id, Location.is_active.is_(True))
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting active location {location_id}: {str(e)}")
            raise RepositoryException(f"Failed to get location: {str(e)}")
