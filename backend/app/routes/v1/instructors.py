# backend/app/routes/v1/instructors.py
"""
Instructor routes - API v1

Versioned instructor endpoints under /api/v1/instructors.
All business logic delegated to InstructorService and AvailabilityService.

Endpoints:
    GET /                                  → Directory search (public, paginated)
    POST /me                               → Create own coaching profile (instructor)
    PATCH /me                              → Update own coaching profile (instructor)
    GET /me/availability                   → Own weekly windows and upcoming blackouts
    PUT /me/availability                   → Replace own weekly windows
    POST /me/blackouts                     → Black out a date
    DELETE /me/blackouts/{blackout_date}   → Remove a blackout
    GET /{instructor_id}                   → Public profile detail
    GET /{instructor_id}/availability      → Open slots for a date (public)
"""

from datetime import date
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ...api.dependencies.auth import get_current_instructor, require_instructor
from ...api.dependencies.services import get_availability_service, get_instructor_service
from ...core.constants import ALLOWED_DURATIONS_MINUTES
from ...core.enums import SkillLevel
from ...core.exceptions import ValidationException
from ...models.instructor import Instructor
from ...models.profile import Profile
from ...schemas.availability import (
    BlackoutCreate,
    BlackoutResponse,
    OpenSlot,
    OpenSlotsResponse,
    WeeklyAvailabilityResponse,
    WeeklyAvailabilityUpdate,
)
from ...schemas.base import PaginatedResponse
from ...schemas.common import PAGE_SIZE_DEFAULT, PAGE_SIZE_MAX
from ...schemas.instructor import (
    InstructorCreate,
    InstructorDetail,
    InstructorSummary,
    InstructorUpdate,
)
from ...services.availability_service import AvailabilityService
from ...services.instructor_service import InstructorService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["instructors-v1"])


@router.get("", response_model=PaginatedResponse[InstructorSummary])
def list_instructors(
    skill_level: Optional[SkillLevel] = Query(None),
    location_id: Optional[str] = Query(None),
    max_rate_cents: Optional[int] = Query(None, gt=0),
    min_rating: Optional[float] = Query(None, ge=1, le=5),
    verified_only: bool = Query(False),
    page: int = Query(1, ge=1),
    per_page: int = Query(PAGE_SIZE_DEFAULT, ge=1, le=PAGE_SIZE_MAX),
    instructor_service: InstructorService = Depends(get_instructor_service),
) -> PaginatedResponse[InstructorSummary]:
    """
    Search instructors accepting students.

    Ordered by rating, then review count.
    """
    instructors, total = instructor_service.list_instructors(
        skill_level=skill_level.value if skill_level else None,
        location_id=location_id,
        max_rate_cents=max_rate_cents,
        min_rating=min_rating,
        verified_only=verified_only,
        page=page,
        per_page=per_page,
    )
    return PaginatedResponse[InstructorSummary](
        items=[InstructorSummary.model_validate(i) for i in instructors],
        total=total,
        page=page,
        per_page=per_page,
        has_next=page * per_page < total,
    )


# =============================================================================
# Own profile (static /me routes before /{instructor_id})
# =============================================================================


@router.post("/me", response_model=InstructorDetail, status_code=status.HTTP_201_CREATED)
def create_my_profile(
    payload: InstructorCreate,
    current_user: Profile = Depends(require_instructor),
    instructor_service: InstructorService = Depends(get_instructor_service),
) -> InstructorDetail:
    instructor = instructor_service.create_profile(current_user, payload.model_dump())
    return InstructorDetail.model_validate(instructor)


@router.patch("/me", response_model=InstructorDetail)
def update_my_profile(
    payload: InstructorUpdate,
    current_user: Profile = Depends(require_instructor),
    instructor_service: InstructorService = Depends(get_instructor_service),
) -> InstructorDetail:
    instructor = instructor_service.update_profile(
        current_user, payload.model_dump(exclude_unset=True)
    )
    return InstructorDetail.model_validate(instructor)


@router.get("/me/availability", response_model=WeeklyAvailabilityResponse)
def get_my_availability(
    instructor: Instructor = Depends(get_current_instructor),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> WeeklyAvailabilityResponse:
    return WeeklyAvailabilityResponse.model_validate(
        availability_service.get_weekly_availability(instructor)
    )


@router.put("/me/availability", response_model=WeeklyAvailabilityResponse)
def set_my_availability(
    payload: WeeklyAvailabilityUpdate,
    instructor: Instructor = Depends(get_current_instructor),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> WeeklyAvailabilityResponse:
    """Replace every weekly window; an empty list clears the schedule."""
    availability_service.set_weekly_availability(
        instructor, [window.model_dump() for window in payload.windows]
    )
    return WeeklyAvailabilityResponse.model_validate(
        availability_service.get_weekly_availability(instructor)
    )


@router.post(
    "/me/blackouts", response_model=BlackoutResponse, status_code=status.HTTP_201_CREATED
)
def add_my_blackout(
    payload: BlackoutCreate,
    instructor: Instructor = Depends(get_current_instructor),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> BlackoutResponse:
    blackout = availability_service.add_blackout(
        instructor, payload.blackout_date, payload.reason
    )
    return BlackoutResponse.model_validate(blackout)


@router.delete("/me/blackouts/{blackout_date}", status_code=status.HTTP_204_NO_CONTENT)
def remove_my_blackout(
    blackout_date: date,
    instructor: Instructor = Depends(get_current_instructor),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Response:
    availability_service.remove_blackout(instructor, blackout_date)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Public profile
# =============================================================================


@router.get("/{instructor_id}", response_model=InstructorDetail)
def get_instructor(
    instructor_id: str,
    instructor_service: InstructorService = Depends(get_instructor_service),
) -> InstructorDetail:
    return InstructorDetail.model_validate(instructor_service.get_instructor(instructor_id))


@router.get("/{instructor_id}/availability", response_model=OpenSlotsResponse)
def get_open_slots(
    instructor_id: str,
    lesson_date: date = Query(..., alias="date"),
    duration_minutes: int = Query(60),
    location_id: Optional[str] = Query(None),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> OpenSlotsResponse:
    """
    Open start times for a lesson of the given length.

    Slots already taken, blacked-out dates and times outside the booking
    horizon are left out.
    """
    if duration_minutes not in ALLOWED_DURATIONS_MINUTES:
        raise ValidationException(
            "Lessons are 60, 90 or 120 minutes",
            code="INVALID_DURATION",
            details={"duration_minutes": duration_minutes},
        )
    slots = availability_service.get_open_slots(
        instructor_id, lesson_date, duration_minutes, location_id=location_id
    )
    return OpenSlotsResponse(
        instructor_id=instructor_id,
        date=lesson_date,
        duration_minutes=duration_minutes,
        slots=[OpenSlot(**slot) for slot in slots],
    )
