# backend/app/routes/v1/reviews.py
"""
Reviews routes - API v1

Versioned review endpoints under /api/v1/reviews.
All business logic delegated to ReviewService.

Endpoints:
    POST /                                   → Submit a review (student)
    GET /instructor/{instructor_id}          → Visible reviews, newest first (public)
    GET /instructor/{instructor_id}/summary  → Rating average and distribution (public)
    POST /{review_id}/response               → Instructor responds to a review
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import get_current_instructor, require_student
from ...api.dependencies.services import get_review_service
from ...models.instructor import Instructor
from ...models.profile import Profile
from ...models.review import Review
from ...schemas.common import PAGE_SIZE_DEFAULT, PAGE_SIZE_MAX
from ...schemas.review import (
    RatingSummaryResponse,
    ReviewItem,
    ReviewListPageResponse,
    ReviewRespondRequest,
    ReviewResponseModel,
    ReviewSubmitRequest,
)
from ...services.review_service import ReviewService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["reviews-v1"])


def _to_item(review: Review) -> ReviewItem:
    response = (
        ReviewResponseModel.model_validate(review.response, from_attributes=True)
        if review.response
        else None
    )
    return ReviewItem(
        id=review.id,
        lesson_id=review.lesson_id,
        instructor_id=review.instructor_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        reviewer_display_name=ReviewService.reviewer_display_name(review),
        response=response,
    )


@router.post("", response_model=ReviewItem, status_code=status.HTTP_201_CREATED)
def submit_review(
    payload: ReviewSubmitRequest,
    current_user: Profile = Depends(require_student),
    service: ReviewService = Depends(get_review_service),
) -> ReviewItem:
    """
    Submit a review for a completed lesson.

    One review per lesson, within the review window after completion.
    """
    review = service.submit_review(
        student=current_user,
        lesson_id=payload.lesson_id,
        rating=payload.rating,
        comment=payload.comment,
    )
    return _to_item(review)


@router.get("/instructor/{instructor_id}", response_model=ReviewListPageResponse)
def list_instructor_reviews(
    instructor_id: str,
    page: int = Query(1, ge=1),
    per_page: int = Query(PAGE_SIZE_DEFAULT, ge=1, le=PAGE_SIZE_MAX),
    min_rating: Optional[int] = Query(None, ge=1, le=5),
    service: ReviewService = Depends(get_review_service),
) -> ReviewListPageResponse:
    reviews, total = service.list_instructor_reviews(
        instructor_id, page=page, per_page=per_page, min_rating=min_rating
    )
    return ReviewListPageResponse(
        reviews=[_to_item(r) for r in reviews],
        total=total,
        page=page,
        per_page=per_page,
        has_next=page * per_page < total,
        has_prev=page > 1,
    )


@router.get("/instructor/{instructor_id}/summary", response_model=RatingSummaryResponse)
def get_rating_summary(
    instructor_id: str,
    service: ReviewService = Depends(get_review_service),
) -> RatingSummaryResponse:
    return RatingSummaryResponse(**service.get_rating_summary(instructor_id))


@router.post(
    "/{review_id}/response",
    response_model=ReviewResponseModel,
    status_code=status.HTTP_201_CREATED,
)
def respond_to_review(
    review_id: str,
    payload: ReviewRespondRequest,
    instructor: Instructor = Depends(get_current_instructor),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponseModel:
    """Respond publicly to a review of one of your lessons. One response per review."""
    response = service.respond_to_review(
        review_id=review_id, instructor=instructor, response_text=payload.response_text
    )
    return ReviewResponseModel.model_validate(response, from_attributes=True)
