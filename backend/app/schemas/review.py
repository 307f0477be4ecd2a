"""Request and response bodies for lesson reviews."""

from datetime import datetime
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, Field

from ..core.constants import (
    REVIEW_COMMENT_MAX_LENGTH,
    REVIEW_COMMENT_MIN_LENGTH,
    REVIEW_RESPONSE_MAX_LENGTH,
)
from .base import StandardizedModel, StrictRequestModel


def _optional_comment(value: Optional[str]) -> Optional[str]:
    # whitespace-only counts as no comment; a star rating alone is a valid review
    if value is None or not value.strip():
        return None
    value = value.strip()
    if len(value) < REVIEW_COMMENT_MIN_LENGTH:
        raise ValueError(f"Comment must be at least {REVIEW_COMMENT_MIN_LENGTH} characters")
    return value


def _required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Response text cannot be empty")
    return value


class ReviewSubmitRequest(StrictRequestModel):
    lesson_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: Annotated[
        Optional[str],
        Field(max_length=REVIEW_COMMENT_MAX_LENGTH),
        AfterValidator(_optional_comment),
    ] = None


class ReviewRespondRequest(StrictRequestModel):
    response_text: Annotated[
        str,
        Field(min_length=1, max_length=REVIEW_RESPONSE_MAX_LENGTH),
        AfterValidator(_required_text),
    ]


class ReviewVisibilityRequest(StrictRequestModel):
    is_visible: bool


class ReviewResponseModel(StandardizedModel):
    id: str
    review_id: str
    instructor_id: str
    response_text: str
    created_at: datetime


class ReviewItem(StandardizedModel):
    id: str
    lesson_id: str
    instructor_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    reviewer_display_name: Optional[str] = None
    response: Optional[ReviewResponseModel] = None


class RatingSummaryResponse(StandardizedModel):
    instructor_id: str
    rating_average: Optional[float] = None
    review_count: int
    # keys are "1".."5"; every star value is present, zero when unused
    distribution: Dict[str, int]


class ReviewListPageResponse(StandardizedModel):
    reviews: List[ReviewItem]
    total: int
    page: int
    per_page: int
    has_next: bool
    has_prev: bool
