# backend/app/repositories/payment_repository.py
"""
Payment Repository for the Sideout Platform

Local ledger of Stripe payment intents and of processed webhook events.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.payment import Payment, StripeWebhookEvent
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    """Repository for Payment rows."""

    def __init__(self, db: Session):
        super().__init__(db, Payment)
        self.logger = logging.getLogger(__name__)

    def get_by_intent_id(self, payment_intent_id: str) -> Optional[Payment]:
        try:
            return (
                self.db.query(Payment)
                .filter(Payment.stripe_payment_intent_id == payment_intent_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting payment {payment_intent_id}: {str(e)}")
            raise RepositoryException(f"Failed to get payment: {str(e)}")


class WebhookEventRepository(BaseRepository[StripeWebhookEvent]):
    """Idempotency ledger for Stripe webhook events."""

    def __init__(self, db: Session):
        super().__init__(db, StripeWebhookEvent)
        self.logger = logging.getLogger(__name__)

    def get_by_event_id(self, event_id: str) -> Optional[StripeWebhookEvent]:
        try:
            return (
                self.db.query(StripeWebhookEvent)
                .filter(StripeWebhookEvent.event_id == event_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting webhook event {event_id}: {str(e)}")
            raise RepositoryException(f"Failed to get webhook event: {str(e)}")
