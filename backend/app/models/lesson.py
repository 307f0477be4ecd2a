# backend/app/models/lesson.py
"""
Lesson model for the Sideout platform.

A lesson is a booked session between a student and an instructor at a beach
location. Lessons are self-contained: date, times and price are stored on the
row at booking time, so later edits to an instructor's rate or availability
never rewrite history.

Times are wall-clock values in the location's timezone.
"""

from datetime import datetime, timezone
import logging
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import LESSON_STATUS_TRANSITIONS, LessonStatus
from ..core.timezone_utils import get_location_timezone, local_to_utc
from ..database import Base

logger = logging.getLogger(__name__)

_LIVE_STATUS_PREDICATE = "status IN ('PENDING', 'CONFIRMED')"


class Lesson(Base):
    """
    Booked lesson between a student and an instructor.

    Double booking of an instructor's slot is prevented by a partial unique
    index over live lessons; concurrent inserts for the same slot fail in the
    database and surface as a booking conflict.
    """

    __tablename__ = "lessons"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    # Core relationships
    student_id = Column(String(26), ForeignKey("profiles.id"), nullable=False, index=True)
    instructor_id = Column(String(26), ForeignKey("instructors.id"), nullable=False, index=True)
    location_id = Column(String(26), ForeignKey("locations.id"), nullable=False)

    # Schedule
    lesson_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    # Lesson details
    lesson_type = Column(String(20), nullable=False, default="private")
    participants = Column(Integer, nullable=False, default=1)
    skill_level = Column(String(20), nullable=True)
    student_note = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=LessonStatus.PENDING.value, index=True)

    # Pricing snapshot (preserved for history)
    price_cents = Column(Integer, nullable=False)
    platform_fee_cents = Column(Integer, nullable=False, default=0)

    # Payment fields
    payment_intent_id = Column(String(255), nullable=True, comment="Current Stripe payment intent")
    payment_status = Column(String(50), nullable=True, comment="Mirrors Stripe intent status")

    # Lifecycle tracking
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    reminder_sent_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_id = Column(String(26), ForeignKey("profiles.id"), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    # Relationships
    student = relationship("Profile", foreign_keys=[student_id], lazy="joined")
    instructor = relationship("Instructor", back_populates="lessons", lazy="joined")
    location = relationship("Location", lazy="joined")
    cancelled_by = relationship("Profile", foreign_keys=[cancelled_by_id])
    review = relationship("Review", back_populates="lesson", uselist=False)
    payments = relationship("Payment", back_populates="lesson", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_lessons_time_order"),
        CheckConstraint("duration_minutes IN (60, 90, 120)", name="ck_lessons_duration"),
        CheckConstraint("participants >= 1 AND participants <= 6", name="ck_lessons_participants"),
        CheckConstraint("price_cents > 0", name="ck_lessons_price_positive"),
        CheckConstraint("platform_fee_cents >= 0", name="ck_lessons_fee_non_negative"),
        CheckConstraint(
            "lesson_type IN ('private', 'semi_private', 'group')", name="ck_lessons_type"
        ),
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', 'NO_SHOW')",
            name="ck_lessons_status",
        ),
        Index(
            "uq_lessons_instructor_live_slot",
            "instructor_id",
            "lesson_date",
            "start_time",
            unique=True,
            postgresql_where=text(_LIVE_STATUS_PREDICATE),
            sqlite_where=text(_LIVE_STATUS_PREDICATE),
        ),
        Index("idx_lessons_instructor_date", "instructor_id", "lesson_date"),
        Index("idx_lessons_student_date", "student_id", "lesson_date"),
    )

    def can_transition_to(self, target: str) -> bool:
        return target in LESSON_STATUS_TRANSITIONS.get(self.status, ())

    def start_utc(self) -> datetime:
        return local_to_utc(self.lesson_date, self.start_time, get_location_timezone(self.location))

    def end_utc(self) -> datetime:
        return local_to_utc(self.lesson_date, self.end_time, get_location_timezone(self.location))

    def is_upcoming(self, now: Optional[datetime] = None) -> bool:
        reference = now or datetime.now(timezone.utc)
        return self.start_utc() > reference

    def has_ended(self, now: Optional[datetime] = None) -> bool:
        reference = now or datetime.now(timezone.utc)
        return self.end_utc() <= reference

    def __repr__(self) -> str:
        return (
            f"<Lesson {self.id} {self.lesson_date} {self.start_time}-{self.end_time} "
            f"status={self.status}>"
        )
