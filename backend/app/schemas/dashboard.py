"""Dashboard response schemas."""

from typing import Dict, List, Optional

from pydantic import Field

from .base import StandardizedModel
from .lesson import LessonResponse


class StudentDashboardResponse(StandardizedModel):
    upcoming_lessons: List[LessonResponse] = Field(default_factory=list)
    recent_lessons: List[LessonResponse] = Field(default_factory=list)
    awaiting_review: List[LessonResponse] = Field(default_factory=list)


class InstructorDashboardResponse(StandardizedModel):
    instructor_id: str
    upcoming_lessons: List[LessonResponse] = Field(default_factory=list)
    lesson_counts: Dict[str, int] = Field(default_factory=dict)
    earnings_cents: int = 0
    rating_average: Optional[float] = None
    review_count: int = 0
