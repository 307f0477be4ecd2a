# backend/app/routes/v1/admin.py
"""
Admin routes - API v1

Support and moderation endpoints. Every route requires the admin role.

Endpoints:
    POST /instructors/{instructor_id}/verify   → Set the verified badge
    POST /reviews/{review_id}/visibility       → Hide or restore a review
    POST /locations                            → Add a venue
    PATCH /locations/{location_id}             → Edit or deactivate a venue
"""

import logging

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import require_admin
from ...api.dependencies.services import (
    get_instructor_service,
    get_location_service,
    get_review_service,
)
from ...schemas.instructor import InstructorDetail, InstructorVerifyRequest
from ...schemas.location import LocationCreate, LocationResponse, LocationUpdate
from ...schemas.review import ReviewItem, ReviewVisibilityRequest
from ...services.instructor_service import InstructorService
from ...services.location_service import LocationService
from ...services.review_service import ReviewService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["admin-v1"], dependencies=[Depends(require_admin)])


@router.post("/instructors/{instructor_id}/verify", response_model=InstructorDetail)
def verify_instructor(
    instructor_id: str,
    payload: InstructorVerifyRequest,
    instructor_service: InstructorService = Depends(get_instructor_service),
) -> InstructorDetail:
    instructor = instructor_service.verify_instructor(instructor_id, payload.is_verified)
    return InstructorDetail.model_validate(instructor)


@router.post("/reviews/{review_id}/visibility", response_model=ReviewItem)
def set_review_visibility(
    review_id: str,
    payload: ReviewVisibilityRequest,
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewItem:
    """Hidden reviews leave the public list and the instructor's rating."""
    review = review_service.set_visibility(review_id, payload.is_visible)
    return ReviewItem(
        id=review.id,
        lesson_id=review.lesson_id,
        instructor_id=review.instructor_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        reviewer_display_name=ReviewService.reviewer_display_name(review),
    )


@router.post(
    "/locations", response_model=LocationResponse, status_code=status.HTTP_201_CREATED
)
def create_location(
    payload: LocationCreate,
    location_service: LocationService = Depends(get_location_service),
) -> LocationResponse:
    return LocationResponse.model_validate(location_service.create_location(payload.model_dump()))


@router.patch("/locations/{location_id}", response_model=LocationResponse)
def update_location(
    location_id: str,
    payload: LocationUpdate,
    location_service: LocationService = Depends(get_location_service),
) -> LocationResponse:
    location = location_service.update_location(
        location_id, payload.model_dump(exclude_unset=True)
    )
    return LocationResponse.model_validate(location)
