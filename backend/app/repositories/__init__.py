# backend/app/repositories/__init__.py
"""
Data access for Sideout.

Services get repositories from RepositoryFactory, for example
``RepositoryFactory.create_lesson_repository(db)``, and keep all commits
to themselves.
"""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .instructor_repository import InstructorRepository
from .lesson_repository import LessonRepository
from .location_repository import LocationRepository
from .payment_repository import PaymentRepository, WebhookEventRepository
from .profile_repository import ProfileRepository
from .review_repository import ReviewRepository, ReviewResponseRepository

__all__ = [
    "BaseRepository",
    "RepositoryFactory",
    "AvailabilityRepository",
    "InstructorRepository",
    "LessonRepository",
    "LocationRepository",
    "PaymentRepository",
    "ProfileRepository",
    "ReviewRepository",
    "ReviewResponseRepository",
    "WebhookEventRepository",
]
