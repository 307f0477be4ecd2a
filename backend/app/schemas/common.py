"""Shared schema types for consistent API contracts."""

from typing import Literal, Optional

from pydantic import BaseModel

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

PAGE_SIZE_DEFAULT = DEFAULT_PAGE_SIZE
PAGE_SIZE_MAX = MAX_PAGE_SIZE


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded"]
    database: Literal["ok", "error"]
    version: str
    environment: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
