"""Centralized pricing calculations for lessons."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import ALLOWED_DURATIONS_MINUTES
from app.core.enums import LessonType
from app.core.exceptions import NotFoundException, ValidationException
from app.models.instructor import Instructor
from app.repositories.factory import RepositoryFactory
from app.services.base import BaseService

TYPE_MULTIPLIERS: Dict[str, Decimal] = {
    LessonType.PRIVATE.value: Decimal("1.0"),
    LessonType.SEMI_PRIVATE.value: Decimal("1.5"),
    LessonType.GROUP.value: Decimal("2.0"),
}

# Inclusive participant bounds per lesson type
PARTICIPANT_RANGES: Dict[str, tuple[int, int]] = {
    LessonType.PRIVATE.value: (1, 1),
    LessonType.SEMI_PRIVATE.value: (2, 2),
    LessonType.GROUP.value: (3, 6),
}


def _round_cents(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class LessonQuote:
    base_price_cents: int
    price_cents: int
    platform_fee_cents: int
    instructor_payout_cents: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PricingService(BaseService):
    """Compute the price, platform fee and payout for a lesson."""

    def __init__(self, db: Session, fee_percentage: Optional[float] = None) -> None:
        super().__init__(db)
        self.instructor_repository = RepositoryFactory.create_instructor_repository(db)
        self.fee_percentage = Decimal(
            str(settings.platform_fee_percentage if fee_percentage is None else fee_percentage)
        )

    @staticmethod
    def validate_lesson_shape(lesson_type: str, duration_minutes: int, participants: int) -> None:
        """
        Check the duration and the participant count for a lesson type.

        Raises:
            ValidationException: If any value is outside what the type allows
        """
        if lesson_type not in TYPE_MULTIPLIERS:
            raise ValidationException(
                f"Unknown lesson type '{lesson_type}'",
                code="INVALID_LESSON_TYPE",
            )
        if duration_minutes not in ALLOWED_DURATIONS_MINUTES:
            raise ValidationException(
                "Lessons are 60, 90 or 120 minutes",
                code="INVALID_DURATION",
                details={"duration_minutes": duration_minutes},
            )
        low, high = PARTICIPANT_RANGES[lesson_type]
        if not low <= participants <= high:
            raise ValidationException(
                f"A {lesson_type} lesson takes {low}-{high} participants"
                if low != high
                else f"A {lesson_type} lesson takes exactly {low} participant(s)",
                code="INVALID_PARTICIPANTS",
                details={"lesson_type": lesson_type, "participants": participants},
            )

    @BaseService.measure_operation("pricing.quote")
    def quote(
        self,
        instructor: Instructor,
        lesson_type: str,
        duration_minutes: int,
        participants: int,
    ) -> LessonQuote:
        self.validate_lesson_shape(lesson_type, duration_minutes, participants)

        base = Decimal(instructor.hourly_rate_cents) * Decimal(duration_minutes) / Decimal(60)
        base_cents = _round_cents(base)
        price_cents = _round_cents(base * TYPE_MULTIPLIERS[lesson_type])
        fee_cents = _round_cents(Decimal(price_cents) * self.fee_percentage / Decimal(100))

        return LessonQuote(
            base_price_cents=base_cents,
            price_cents=price_cents,
            platform_fee_cents=fee_cents,
            instructor_payout_cents=price_cents - fee_cents,
        )

    def quote_for_instructor_id(
        self,
        instructor_id: str,
        lesson_type: str,
        duration_minutes: int,
        participants: int,
    ) -> LessonQuote:
        instructor = self.instructor_repository.get_by_id(instructor_id)
        if instructor is None:
            raise NotFoundException(
                "Instructor not found",
                code="INSTRUCTOR_NOT_FOUND",
                details={"instructor_id": instructor_id},
            )
        return self.quote(instructor, lesson_type, duration_minutes, participants)
