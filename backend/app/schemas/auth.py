"""Schemas for registration, login and the caller's own profile."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field, field_validator

from ..core.enums import SkillLevel
from .base import StandardizedModel, StrictRequestModel


class RegisterRequest(StrictRequestModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    role: Literal["student", "instructor"] = "student"
    skill_level: Optional[SkillLevel] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class ProfileUpdate(StrictRequestModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    skill_level: Optional[SkillLevel] = None


class ProfileResponse(StandardizedModel):
    id: str
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: str
    skill_level: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


class TokenResponse(StandardizedModel):
    access_token: str
    token_type: str = "bearer"
