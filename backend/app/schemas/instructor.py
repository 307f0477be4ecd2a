"""Schemas for instructor coaching profiles."""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, Field

from ..core.enums import SkillLevel
from .availability import AvailabilityWindowResponse
from .base import StandardizedModel, StrictRequestModel

MAX_RATE_CENTS = 100_000


def _clean_tags(values: List[str]) -> List[str]:
    cleaned: List[str] = []
    for value in values:
        value = value.strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


# Certifications and specialties: trimmed, blanks and repeats dropped, order kept
Tags = Annotated[List[str], AfterValidator(_clean_tags)]


class InstructorCreate(StrictRequestModel):
    bio: Optional[str] = Field(None, max_length=2000)
    years_experience: int = Field(0, ge=0, le=60)
    certifications: Tags = Field(default_factory=list, max_length=20)
    specialties: Tags = Field(default_factory=list, max_length=20)
    skill_levels: List[SkillLevel] = Field(..., min_length=1)
    hourly_rate_cents: int = Field(..., gt=0, le=MAX_RATE_CENTS)
    is_accepting_students: bool = True


class InstructorUpdate(StrictRequestModel):
    bio: Optional[str] = Field(None, max_length=2000)
    years_experience: Optional[int] = Field(None, ge=0, le=60)
    certifications: Optional[Tags] = Field(None, max_length=20)
    specialties: Optional[Tags] = Field(None, max_length=20)
    skill_levels: Optional[List[SkillLevel]] = Field(None, min_length=1)
    hourly_rate_cents: Optional[int] = Field(None, gt=0, le=MAX_RATE_CENTS)
    is_accepting_students: Optional[bool] = None
    stripe_account_id: Optional[str] = Field(None, pattern=r"^acct_[A-Za-z0-9]+$")


class InstructorSummary(StandardizedModel):
    id: str
    display_name: str
    bio: Optional[str] = None
    years_experience: int
    specialties: List[str] = Field(default_factory=list)
    skill_levels: List[str] = Field(default_factory=list)
    hourly_rate_cents: int
    photo_url: Optional[str] = None
    is_verified: bool
    rating_average: Optional[float] = None
    review_count: int


class InstructorDetail(InstructorSummary):
    certifications: List[str] = Field(default_factory=list)
    is_accepting_students: bool
    availability_windows: List[AvailabilityWindowResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class InstructorVerifyRequest(StrictRequestModel):
    is_verified: bool
