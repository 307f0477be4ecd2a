# backend/app/core/enums.py
"""
Core enums for the Sideout platform.

These enums back CHECK constraints in the schema and the request/response
schemas, so the values double as the wire format.
"""

from enum import Enum
from typing import Optional


class RoleName(str, Enum):
    """Roles a profile can hold."""

    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    STUDENT = "student"


class SkillLevel(str, Enum):
    """Player skill levels used for matching students and instructors."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    COMPETITIVE = "competitive"


class LessonType(str, Enum):
    """Lesson formats offered by instructors."""

    PRIVATE = "private"
    SEMI_PRIVATE = "semi_private"
    GROUP = "group"


class LessonStatus(str, Enum):
    """Lesson lifecycle statuses."""

    PENDING = "PENDING"  # Created, awaiting payment
    CONFIRMED = "CONFIRMED"  # Payment succeeded
    COMPLETED = "COMPLETED"  # Lesson took place
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"  # Student didn't attend


LIVE_LESSON_STATUSES = (LessonStatus.PENDING.value, LessonStatus.CONFIRMED.value)

LESSON_STATUS_TRANSITIONS = {
    LessonStatus.PENDING.value: (LessonStatus.CONFIRMED.value, LessonStatus.CANCELLED.value),
    LessonStatus.CONFIRMED.value: (
        LessonStatus.COMPLETED.value,
        LessonStatus.CANCELLED.value,
        LessonStatus.NO_SHOW.value,
    ),
    LessonStatus.COMPLETED.value: (),
    LessonStatus.CANCELLED.value: (),
    LessonStatus.NO_SHOW.value: (),
}


class PaymentDisplayStatus(str, Enum):
    """What the apps show for a lesson's payment, derived from the Stripe status."""

    UNPAID = "unpaid"
    PROCESSING = "processing"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"
    VOIDED = "voided"


_PAYMENT_DISPLAY = {
    "requires_payment_method": PaymentDisplayStatus.UNPAID,
    "requires_confirmation": PaymentDisplayStatus.UNPAID,
    "requires_action": PaymentDisplayStatus.UNPAID,
    "processing": PaymentDisplayStatus.PROCESSING,
    "succeeded": PaymentDisplayStatus.PAID,
    "failed": PaymentDisplayStatus.FAILED,
    "refunded": PaymentDisplayStatus.REFUNDED,
    "partially_refunded": PaymentDisplayStatus.PARTIALLY_REFUNDED,
    # an intent cancelled before capture never charged the card
    "canceled": PaymentDisplayStatus.VOIDED,
}


def payment_display_status(stripe_status: Optional[str]) -> str:
    if not stripe_status:
        return PaymentDisplayStatus.UNPAID.value
    return _PAYMENT_DISPLAY.get(stripe_status, PaymentDisplayStatus.PROCESSING).value
