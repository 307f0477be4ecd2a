# backend/app/routes/v1/lessons.py
"""
Lesson routes - API v1

Versioned lesson endpoints under /api/v1/lessons.
All business logic delegated to LessonService and PricingService.

Endpoints:
    GET /quote                         → Price a lesson (public)
    POST /                             → Book a lesson (student)
    GET /                              → Own lessons (student or instructor)
    GET /{lesson_id}                   → Lesson detail (participant or admin)
    POST /{lesson_id}/cancel           → Cancel with refund policy
    POST /{lesson_id}/complete         → Mark completed (instructor)
    POST /{lesson_id}/no-show          → Mark no-show (instructor)
    POST /{lesson_id}/payment-intent   → Reuse or reopen the payment intent (student)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ...api.dependencies.auth import get_current_user, require_student
from ...api.dependencies.services import get_lesson_service, get_pricing_service
from ...core.config import settings
from ...core.enums import LessonStatus, LessonType
from ...models.profile import Profile
from ...schemas.lesson import (
    LessonBookingResponse,
    LessonCancelRequest,
    LessonCreate,
    LessonListResponse,
    LessonQuoteResponse,
    LessonResponse,
    PaymentIntentResponse,
)
from ...services.lesson_service import LessonService
from ...services.pricing_service import PricingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["lessons-v1"])


# =============================================================================
# Static routes first (before dynamic routes with path parameters)
# =============================================================================


@router.get("/quote", response_model=LessonQuoteResponse)
def quote_lesson(
    instructor_id: str = Query(...),
    duration_minutes: int = Query(60),
    lesson_type: LessonType = Query(LessonType.PRIVATE),
    participants: int = Query(1, ge=1),
    pricing_service: PricingService = Depends(get_pricing_service),
) -> LessonQuoteResponse:
    """Price a lesson without booking it."""
    quote = pricing_service.quote_for_instructor_id(
        instructor_id, lesson_type.value, duration_minutes, participants
    )
    return LessonQuoteResponse(**quote.to_dict(), currency=settings.stripe_currency)


@router.post("", response_model=LessonBookingResponse, status_code=status.HTTP_201_CREATED)
def book_lesson(
    payload: LessonCreate,
    current_user: Profile = Depends(require_student),
    lesson_service: LessonService = Depends(get_lesson_service),
) -> LessonBookingResponse:
    """
    Book a lesson.

    The lesson is created PENDING and holds the slot while the student pays
    with the returned client secret. It becomes CONFIRMED when Stripe reports
    the payment.
    """
    lesson, intent = lesson_service.book_lesson(current_user, payload.model_dump())
    return LessonBookingResponse(
        lesson=LessonResponse.from_lesson(lesson),
        client_secret=intent.get("client_secret"),
        publishable_key=settings.stripe_publishable_key,
    )


@router.get("", response_model=LessonListResponse)
def list_lessons(
    status_filter: Optional[LessonStatus] = Query(None, alias="status"),
    upcoming: bool = Query(False),
    current_user: Profile = Depends(get_current_user),
    lesson_service: LessonService = Depends(get_lesson_service),
) -> LessonListResponse:
    lessons = lesson_service.list_lessons(
        current_user,
        status=status_filter.value if status_filter else None,
        upcoming=upcoming,
    )
    return LessonListResponse(
        lessons=[LessonResponse.from_lesson(lesson) for lesson in lessons],
        total=len(lessons),
    )


# =============================================================================
# Single lesson
# =============================================================================


@router.get("/{lesson_id}", response_model=LessonResponse)
def get_lesson(
    lesson_id: str,
    current_user: Profile = Depends(get_current_user),
    lesson_service: LessonService = Depends(get_lesson_service),
) -> LessonResponse:
    return LessonResponse.from_lesson(lesson_service.get_lesson(lesson_id, current_user))


@router.post("/{lesson_id}/cancel", response_model=LessonResponse)
def cancel_lesson(
    lesson_id: str,
    payload: Optional[LessonCancelRequest] = Body(None),
    current_user: Profile = Depends(get_current_user),
    lesson_service: LessonService = Depends(get_lesson_service),
) -> LessonResponse:
    """
    Cancel a pending or confirmed lesson before it starts.

    Confirmed lessons are refunded in full when the instructor cancels or when
    the student cancels before the refund cutoff.
    """
    lesson = lesson_service.cancel_lesson(
        lesson_id, current_user, reason=payload.reason if payload else None
    )
    return LessonResponse.from_lesson(lesson)


@router.post("/{lesson_id}/complete", response_model=LessonResponse)
def complete_lesson(
    lesson_id: str,
    current_user: Profile = Depends(get_current_user),
    lesson_service: LessonService = Depends(get_lesson_service),
) -> LessonResponse:
    return LessonResponse.from_lesson(lesson_service.complete_lesson(lesson_id, current_user))


@router.post("/{lesson_id}/no-show", response_model=LessonResponse)
def mark_no_show(
    lesson_id: str,
    current_user: Profile = Depends(get_current_user),
    lesson_service: LessonService = Depends(get_lesson_service),
) -> LessonResponse:
    return LessonResponse.from_lesson(lesson_service.mark_no_show(lesson_id, current_user))


@router.post("/{lesson_id}/payment-intent", response_model=PaymentIntentResponse)
def retry_payment(
    lesson_id: str,
    current_user: Profile = Depends(require_student),
    lesson_service: LessonService = Depends(get_lesson_service),
) -> PaymentIntentResponse:
    """Return a usable client secret for a lesson still awaiting payment."""
    lesson, intent = lesson_service.retry_payment(lesson_id, current_user)
    return PaymentIntentResponse(
        lesson_id=lesson.id,
        payment_intent_id=intent["id"],
        client_secret=intent.get("client_secret"),
        publishable_key=settings.stripe_publishable_key,
    )
