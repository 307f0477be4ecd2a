"""Schemas for weekly availability, blackout dates and open slots."""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import Field, model_validator

from .base import StandardizedModel, StrictRequestModel


class AvailabilityWindowIn(StrictRequestModel):
    """A recurring weekly window (day_of_week: Monday=0 .. Sunday=6)."""

    day_of_week: int = Field(..., ge=0, le=6)
    start_time: time
    end_time: time
    location_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_time_order(self) -> "AvailabilityWindowIn":
        if self.start_time >= self.end_time:
            raise ValueError("End time must be after start time")
        return self


class WeeklyAvailabilityUpdate(StrictRequestModel):
    windows: List[AvailabilityWindowIn] = Field(default_factory=list, max_length=50)


class AvailabilityWindowResponse(StandardizedModel):
    id: str
    day_of_week: int
    start_time: time
    end_time: time
    location_id: Optional[str] = None


class BlackoutCreate(StrictRequestModel):
    blackout_date: date
    reason: Optional[str] = Field(None, max_length=255)


class BlackoutResponse(StandardizedModel):
    id: str
    blackout_date: date
    reason: Optional[str] = None
    created_at: Optional[datetime] = None


class WeeklyAvailabilityResponse(StandardizedModel):
    windows: List[AvailabilityWindowResponse]
    blackouts: List[BlackoutResponse]


class OpenSlot(StandardizedModel):
    start_time: time
    end_time: time
    location_id: Optional[str] = None


class OpenSlotsResponse(StandardizedModel):
    instructor_id: str
    date: date
    duration_minutes: int
    slots: List[OpenSlot]
