"""
Database models for the Sideout platform.

This module exports all SQLAlchemy models used in the application.
The models are organized by functionality:
- Accounts (profiles) and instructor coaching profiles
- Beach locations
- Availability windows and blackout dates
- Lessons, payments and processed Stripe webhook events
- Reviews and instructor responses
"""

from .availability import InstructorAvailability, InstructorBlackout
from .instructor import Instructor
from .lesson import Lesson
from .location import Location
from .payment import Payment, StripeWebhookEvent
from .profile import Profile
from .review import Review, ReviewResponse

__all__ = [
    "Profile",
    "Instructor",
    "Location",
    "InstructorAvailability",
    "InstructorBlackout",
    "Lesson",
    "Payment",
    "StripeWebhookEvent",
    "Review",
    "ReviewResponse",
]
