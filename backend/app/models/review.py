# backend/app/models/review.py
"""
Reviews & Ratings models for Sideout.

Design notes:
- One review per lesson (DB unique constraint on lesson_id)
- Only completed lessons can be reviewed; enforced in ReviewService
- Hidden reviews are excluded from display and from instructor aggregates
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class Review(Base):
    """
    Per-lesson review submitted by the student who took the lesson.
    """

    __tablename__ = "reviews"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))

    lesson_id = Column(
        String(26), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    student_id = Column(
        String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    instructor_id = Column(
        String(26), ForeignKey("instructors.id", ondelete="CASCADE"), nullable=False, index=True
    )

    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    is_visible = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=lambda: datetime.now(timezone.utc),
    )

    lesson = relationship("Lesson", back_populates="review")
    student = relationship("Profile", lazy="joined")
    response = relationship(
        "ReviewResponse", uselist=False, back_populates="review", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("lesson_id", name="uq_reviews_lesson"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        CheckConstraint(
            "comment IS NULL OR length(comment) <= 1000", name="ck_reviews_comment_length"
        ),
        Index("idx_reviews_instructor_visible", "instructor_id", "is_visible"),
    )

    def __repr__(self) -> str:
        return f"<Review {self.id} lesson={self.lesson_id} rating={self.rating}>"


class ReviewResponse(Base):
    """Single public reply from the instructor to a review."""

    __tablename__ = "review_responses"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    review_id = Column(
        String(26), ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    instructor_id = Column(
        String(26), ForeignKey("instructors.id", ondelete="CASCADE"), nullable=False
    )
    response_text = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    review = relationship("Review", back_populates="response")

    __table_args__ = (
        UniqueConstraint("review_id", name="uq_review_responses_review"),
        CheckConstraint("length(response_text) <= 1000", name="ck_review_responses_length"),
    )
