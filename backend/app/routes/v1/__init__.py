# backend/app/routes/v1/__init__.py
"""Routers mounted under /api/v1 by app.main; each module exposes ``router``."""

from . import (
    admin,
    auth,
    dashboard,
    health,
    instructors,
    lessons,
    locations,
    payments,
    reviews,
    uploads,
)

__all__ = [
    "admin",
    "auth",
    "dashboard",
    "health",
    "instructors",
    "lessons",
    "locations",
    "payments",
    "reviews",
    "uploads",
]
