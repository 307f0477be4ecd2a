# backend/app/repositories/factory.py
"""
One place to build repositories for a session.

Services call these instead of constructing repositories directly so tests
can patch a single attribute to swap a repository out.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

if TYPE_CHECKING:
    from .availability_repository import AvailabilityRepository
    from .instructor_repository import InstructorRepository
    from .lesson_repository import LessonRepository
    from .location_repository import LocationRepository
    from .payment_repository import PaymentRepository, WebhookEventRepository
    from .profile_repository import ProfileRepository
    from .review_repository import ReviewRepository, ReviewResponseRepository


class RepositoryFactory:
    @staticmethod
    def create_profile_repository(db: Session) -> "ProfileRepository":
        from .profile_repository import ProfileRepository

        return ProfileRepository(db)

    @staticmethod
    def create_instructor_repository(db: Session) -> "InstructorRepository":
        from .instructor_repository import InstructorRepository

        return InstructorRepository(db)

    @staticmethod
    def create_location_repository(db: Session) -> "LocationRepository":
        from .location_repository import LocationRepository

        return LocationRepository(db)

    @staticmethod
    def create_availability_repository(db: Session) -> "AvailabilityRepository":
        """Weekly windows and blackout dates."""
        from .availability_repository import AvailabilityRepository

        return AvailabilityRepository(db)

    @staticmethod
    def create_lesson_repository(db: Session) -> "LessonRepository":
        """Lessons, including the live-slot queries used for conflict checks."""
        from .lesson_repository import LessonRepository

        return LessonRepository(db)

    @staticmethod
    def create_review_repository(db: Session) -> "ReviewRepository":
        from .review_repository import ReviewRepository

        return ReviewRepository(db)

    @staticmethod
    def create_review_response_repository(db: Session) -> "ReviewResponseRepository":
        from .review_repository import ReviewResponseRepository

        return ReviewResponseRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> "PaymentRepository":
        from .payment_repository import PaymentRepository

        return PaymentRepository(db)

    @staticmethod
    def create_webhook_event_repository(db: Session) -> "WebhookEventRepository":
        """Processed Stripe event ids, for webhook idempotency."""
        from .payment_repository import WebhookEventRepository

        return WebhookEventRepository(db)
