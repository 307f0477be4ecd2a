"""Schemas for beach locations."""

from datetime import datetime
from typing import Annotated, List, Optional

import pytz
from pydantic import AfterValidator, Field

from .base import StandardizedModel, StrictRequestModel


def _validate_timezone(v: str) -> str:
    if v not in pytz.all_timezones_set:
        raise ValueError(f"Invalid timezone: {v}")
    return v


TimezoneName = Annotated[str, AfterValidator(_validate_timezone)]


class LocationCreate(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=120)
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    court_count: int = Field(1, ge=1, le=100)
    timezone: TimezoneName = "America/Los_Angeles"
    amenities: List[str] = Field(default_factory=list)


class LocationUpdate(StrictRequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    court_count: Optional[int] = Field(None, ge=1, le=100)
    timezone: Optional[TimezoneName] = None
    amenities: Optional[List[str]] = None
    is_active: Optional[bool] = None


class LocationResponse(StandardizedModel):
    id: str
    name: str
    address: str
    city: str
    state: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    court_count: int
    timezone: str
    amenities: List[str] = Field(default_factory=list)
    is_active: bool
    created_at: Optional[datetime] = None
