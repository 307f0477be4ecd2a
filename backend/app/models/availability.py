# backend/app/models/availability.py
"""
Instructor availability models.

Availability is expressed as recurring weekly windows (e.g. Saturdays
08:00-12:00 at Main Beach) plus one-off blackout dates. Open slots are
derived from these at read time; nothing is materialized per date.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class InstructorAvailability(Base):
    """Recurring weekly teaching window (day_of_week: Monday=0 .. Sunday=6)."""

    __tablename__ = "instructor_availability"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    instructor_id = Column(
        String(26), ForeignKey("instructors.id", ondelete="CASCADE"), nullable=False
    )
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    location_id = Column(
        String(26), ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    instructor = relationship("Instructor", back_populates="availability_windows")
    location = relationship("Location", lazy="joined")

    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_availability_day"),
        CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
        Index("idx_availability_instructor_day", "instructor_id", "day_of_week"),
    )


class InstructorBlackout(Base):
    """A date on which the instructor does not teach."""

    __tablename__ = "instructor_blackouts"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    instructor_id = Column(
        String(26), ForeignKey("instructors.id", ondelete="CASCADE"), nullable=False
    )
    blackout_date = Column(Date, nullable=False)
    reason = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    instructor = relationship("Instructor", back_populates="blackouts")

    __table_args__ = (
        UniqueConstraint("instructor_id", "blackout_date", name="uq_blackouts_instructor_date"),
    )
