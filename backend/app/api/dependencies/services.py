# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.auth_service import AuthService
from ...services.availability_service import AvailabilityService
from ...services.dashboard_service import DashboardService
from ...services.email import EmailService
from ...services.instructor_service import InstructorService
from ...services.lesson_service import LessonService
from ...services.location_service import LocationService
from ...services.notification_service import NotificationService
from ...services.pricing_service import PricingService
from ...services.review_service import ReviewService
from ...services.stripe_service import StripeService
from ...services.template_service import TemplateService
from ...services.upload_service import UploadService
from ...database import get_db

logger = logging.getLogger(__name__)


def get_email_service(db: Session = Depends(get_db)) -> EmailService:
    """Get email service instance for dependency injection."""
    return EmailService(db)


def get_notification_service(
    db: Session = Depends(get_db), email_service: EmailService = Depends(get_email_service)
) -> NotificationService:
    """
    Get notification service instance for dependency injection.

    Args:
        db: Database session
        email_service: Email service for outbound mail

    Returns:
        NotificationService instance
    """
    return NotificationService(db, email_service=email_service, template_service=TemplateService())


def get_auth_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> AuthService:
    return AuthService(db, notification_service=notification_service)


def get_pricing_service(db: Session = Depends(get_db)) -> PricingService:
    """Get pricing service instance for dependency injection."""
    return PricingService(db)


def get_instructor_service(db: Session = Depends(get_db)) -> InstructorService:
    return InstructorService(db)


def get_location_service(db: Session = Depends(get_db)) -> LocationService:
    return LocationService(db)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_stripe_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> StripeService:
    return StripeService(db, notification_service=notification_service)


def get_lesson_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
    stripe_service: StripeService = Depends(get_stripe_service),
    pricing_service: PricingService = Depends(get_pricing_service),
) -> LessonService:
    """
    Get lesson service instance for dependency injection.

    Args:
        db: Database session
        notification_service: Notification service for emails
        stripe_service: Stripe service for payment intents and refunds
        pricing_service: Pricing service for quotes

    Returns:
        LessonService instance
    """
    return LessonService(
        db,
        stripe_service=stripe_service,
        notification_service=notification_service,
        pricing_service=pricing_service,
    )


def get_review_service(
    db: Session = Depends(get_db),
    instructor_service: InstructorService = Depends(get_instructor_service),
) -> ReviewService:
    return ReviewService(db, instructor_service=instructor_service)


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(db)


def get_upload_service(db: Session = Depends(get_db)) -> UploadService:
    return UploadService(db)
