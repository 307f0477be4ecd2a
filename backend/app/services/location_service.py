# backend/app/services/location_service.py
"""
Location Service for the Sideout Platform

Beach locations are managed by admins. Deactivating a location keeps its
history but stops new lessons from being booked there.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..models.location import Location
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class LocationService(BaseService):
    """Service for listing and managing beach locations."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_location_repository(db)

    @BaseService.measure_operation("list_locations")
    def list_locations(
        self, city: Optional[str] = None, include_inactive: bool = False
    ) -> List[Location]:
        return self.repository.list_locations(city=city, include_inactive=include_inactive)

    @BaseService.measure_operation("get_location")
    def get_location(self, location_id: str) -> Location:
        location = self.repository.get_by_id(location_id)
        if location is None:
            raise NotFoundException(
                "Location not found",
                code="LOCATION_NOT_FOUND",
                details={"location_id": location_id},
            )
        return location

    def get_active_location(self, location_id: str) -> Location:
        """
        Get a location that accepts new lessons.

        Raises:
            NotFoundException: Unknown location
            ValidationException: Location is deactivated
        """
        location = self.get_location(location_id)
        if not location.is_active:
            raise ValidationException(
                f"{location.name} is not accepting lessons",
                code="LOCATION_INACTIVE",
                details={"location_id": location_id},
            )
        return location

    @BaseService.measure_operation("create_location")
    def create_location(self, data: Dict[str, Any]) -> Location:
        with self.transaction():
            location = self.repository.create(**data)
        self.log_operation("create_location", location_id=location.id, city=location.city)
        return location

    @BaseService.measure_operation("update_location")
    def update_location(self, location_id: str, updates: Dict[str, Any]) -> Location:
        location = self.get_location(location_id)
        with self.transaction():
            for key, value in updates.items():
                setattr(location, key, value)
            self.db.flush()
        if updates.get("is_active") is False:
            self.logger.info(f"Location {location_id} deactivated")
        return location
