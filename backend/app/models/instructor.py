# backend/app/models/instructor.py
"""
Instructor model for the Sideout platform.

Holds the public coaching profile of an instructor: bio, experience,
certifications, the skill levels they teach, their rate and their payout
account. Rating aggregates are denormalized here and refreshed whenever a
review is submitted or moderated.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Instructor(Base):
    """Coaching profile attached one-to-one to an instructor's Profile."""

    __tablename__ = "instructors"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    profile_id = Column(
        String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    bio = Column(Text, nullable=True)
    years_experience = Column(Integer, nullable=False, default=0)
    # Use generic JSON for cross-dialect compatibility (SQLite in tests)
    certifications = Column(JSON, nullable=False, default=list)
    specialties = Column(JSON, nullable=False, default=list)
    skill_levels = Column(JSON, nullable=False, default=list)
    hourly_rate_cents = Column(Integer, nullable=False)

    photo_url = Column(String(500), nullable=True)
    photo_key = Column(String(255), nullable=True)
    stripe_account_id = Column(String(255), nullable=True, comment="Stripe Connect account")

    is_verified = Column(Boolean, nullable=False, default=False)
    is_accepting_students = Column(Boolean, nullable=False, default=True)

    rating_average = Column(Float, nullable=True)
    review_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    profile = relationship("Profile", back_populates="instructor", lazy="joined")
    availability_windows = relationship(
        "InstructorAvailability",
        back_populates="instructor",
        cascade="all, delete-orphan",
        order_by="(InstructorAvailability.day_of_week, InstructorAvailability.start_time)",
    )
    blackouts = relationship(
        "InstructorBlackout", back_populates="instructor", cascade="all, delete-orphan"
    )
    lessons = relationship("Lesson", back_populates="instructor")

    __table_args__ = (
        CheckConstraint("years_experience >= 0", name="ck_instructors_experience"),
        CheckConstraint("hourly_rate_cents > 0", name="ck_instructors_rate_positive"),
        CheckConstraint("review_count >= 0", name="ck_instructors_review_count"),
        CheckConstraint(
            "rating_average IS NULL OR (rating_average >= 1 AND rating_average <= 5)",
            name="ck_instructors_rating_range",
        ),
    )

    @property
    def display_name(self) -> str:
        return self.profile.display_name if self.profile else ""

    def __repr__(self) -> str:
        return f"<Instructor {self.id} profile={self.profile_id}>"
