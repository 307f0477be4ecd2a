# backend/app/schemas/base.py
"""
Shared pydantic bases for Sideout request and response bodies.

Request bodies reject unknown keys so a typo like ``particpant_count`` fails
with a 422 instead of silently falling back to a default. Response bodies
read straight off ORM rows.
"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class StandardizedModel(BaseModel):
    """Response model built from ORM attributes; enums serialize as values."""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True, from_attributes=True)


class StrictModel(BaseModel):
    """Fixed-shape response that is never built from ORM rows."""

    model_config = ConfigDict(extra="forbid")


class StrictRequestModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )


T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a list endpoint."""

    items: List[T]
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    per_page: int = Field(ge=1)
    has_next: bool
