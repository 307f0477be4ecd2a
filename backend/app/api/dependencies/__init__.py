# backend/app/api/dependencies/__init__.py
"""
FastAPI dependencies for the v1 routers: the caller's profile, role gates,
and per-request service instances sharing one database session.
"""

from ...database import get_db
from .auth import (
    get_current_instructor,
    get_current_user,
    require_admin,
    require_instructor,
    require_student,
)
from .services import (
    get_auth_service,
    get_availability_service,
    get_dashboard_service,
    get_instructor_service,
    get_lesson_service,
    get_location_service,
    get_notification_service,
    get_pricing_service,
    get_review_service,
    get_stripe_service,
    get_upload_service,
)

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_instructor",
    "require_student",
    "require_instructor",
    "require_admin",
    "get_auth_service",
    "get_availability_service",
    "get_dashboard_service",
    "get_instructor_service",
    "get_lesson_service",
    "get_location_service",
    "get_notification_service",
    "get_pricing_service",
    "get_review_service",
    "get_stripe_service",
    "get_upload_service",
]
