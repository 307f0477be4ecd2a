# backend/app/routes/v1/locations.py
"""
Location routes - API v1

Beach venues where lessons take place. Reading is public; venue management
lives under /api/v1/admin/locations.

Endpoints:
    GET /                    → List active locations, optionally by city
    GET /{location_id}       → Location detail
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.services import get_location_service
from ...schemas.location import LocationResponse
from ...services.location_service import LocationService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["locations-v1"])


@router.get("", response_model=List[LocationResponse])
def list_locations(
    city: Optional[str] = Query(None, max_length=100),
    location_service: LocationService = Depends(get_location_service),
) -> List[LocationResponse]:
    return [LocationResponse.model_validate(loc) for loc in location_service.list_locations(city)]


@router.get("/{location_id}", response_model=LocationResponse)
def get_location(
    location_id: str,
    location_service: LocationService = Depends(get_location_service),
) -> LocationResponse:
    return LocationResponse.model_validate(location_service.get_location(location_id))
