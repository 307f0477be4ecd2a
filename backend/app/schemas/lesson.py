"""Schemas for booking, listing and managing lessons."""

from datetime import date, datetime, time
from typing import Any, List, Optional

from pydantic import Field, computed_field, field_validator

from ..core.enums import LessonType, SkillLevel, payment_display_status
from .base import StandardizedModel, StrictRequestModel


class LessonCreate(StrictRequestModel):
    """
    Book a lesson.

    Times are wall-clock times at the location. Duration and participant
    rules per lesson type are checked by the booking service.
    """

    instructor_id: str = Field(..., min_length=1)
    location_id: str = Field(..., min_length=1)
    lesson_date: date
    start_time: time
    duration_minutes: int = Field(..., gt=0)
    lesson_type: LessonType = LessonType.PRIVATE
    participants: int = Field(1, ge=1)
    skill_level: Optional[SkillLevel] = None
    student_note: Optional[str] = Field(None, max_length=500)

    @field_validator("student_note")
    @classmethod
    def clean_note(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        return v or None


class LessonCancelRequest(StrictRequestModel):
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        return v or None


class LessonResponse(StandardizedModel):
    id: str
    student_id: str
    instructor_id: str
    location_id: str
    lesson_date: date
    start_time: time
    end_time: time
    duration_minutes: int
    lesson_type: str
    participants: int
    skill_level: Optional[str] = None
    student_note: Optional[str] = None
    status: str
    price_cents: int
    platform_fee_cents: int
    payment_intent_id: Optional[str] = None
    payment_status: Optional[str] = None
    student_name: Optional[str] = None
    instructor_name: Optional[str] = None
    location_name: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def payment_display_status(self) -> str:
        return payment_display_status(self.payment_status)

    @classmethod
    def from_lesson(cls, lesson: Any) -> "LessonResponse":
        """Build the response from a Lesson, flattening related names."""
        response = cls.model_validate(lesson)
        response.student_name = lesson.student.display_name if lesson.student else None
        response.instructor_name = lesson.instructor.display_name if lesson.instructor else None
        response.location_name = lesson.location.name if lesson.location else None
        return response


class LessonBookingResponse(StandardizedModel):
    lesson: LessonResponse
    client_secret: Optional[str] = None
    publishable_key: Optional[str] = None


class PaymentIntentResponse(StandardizedModel):
    lesson_id: str
    payment_intent_id: str
    client_secret: Optional[str] = None
    publishable_key: Optional[str] = None


class LessonListResponse(StandardizedModel):
    lessons: List[LessonResponse]
    total: int


class LessonQuoteResponse(StandardizedModel):
    base_price_cents: int
    price_cents: int
    platform_fee_cents: int
    instructor_payout_cents: int
    currency: str
