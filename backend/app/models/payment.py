"""
Payment models for Stripe integration.

Stripe owns the payment intent; these rows are a local ledger of the intents
created for lessons and of the webhook events already processed.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from app.database import Base

if TYPE_CHECKING:
    from app.models.lesson import Lesson


class Payment(Base):
    """Local record of a Stripe payment intent created for a lesson."""

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    lesson_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    stripe_payment_intent_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    application_fee_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="usd")
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    refunded_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stripe_refund_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # Relationships
    lesson: Mapped["Lesson"] = relationship("Lesson", back_populates="payments")

    def __repr__(self) -> str:
        return (
            f"<Payment(lesson_id={self.lesson_id}, "
            f"intent={self.stripe_payment_intent_id}, status={self.status})>"
        )


class StripeWebhookEvent(Base):
    """Processed Stripe webhook events, keyed by Stripe event id for idempotency."""

    __tablename__ = "stripe_webhook_events"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    event_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="processed")
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<StripeWebhookEvent(event_id={self.event_id}, type={self.event_type})>"
