"""
Stripe Service for the Sideout Platform

Implements all Stripe API interactions for lesson payments. Stripe owns the
payment intent; this service creates, cancels and refunds intents, and
mirrors intent status locally from webhook events.

Key Features:
- Destination charges with an application fee when the instructor has a
  connected account
- Mock mode when no secret key is configured (local development, tests)
- Webhook signature validation
- Idempotent webhook processing through the StripeWebhookEvent ledger
"""

from datetime import datetime, timezone
import json
import logging
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session
import stripe

from ..core.config import settings
from ..core.enums import LessonStatus
from ..core.exceptions import ExternalServiceException, ServiceException, ValidationException
from ..models.instructor import Instructor
from ..models.lesson import Lesson
from ..models.payment import Payment
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .conflict_checker import ConflictChecker
from .notification_service import NotificationService

logger: logging.Logger = logging.getLogger(__name__)

AfterCommit = Optional[Callable[[], Any]]


class StripeService(BaseService):
    """
    Service for all Stripe API interactions and payment webhooks.
    """

    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.webhook_event_repository = RepositoryFactory.create_webhook_event_repository(db)
        self.lesson_repository = RepositoryFactory.create_lesson_repository(db)
        self._notification_service = notification_service

        self.stripe_configured = False
        if settings.stripe_configured:
            stripe.api_key = settings.stripe_secret_key.get_secret_value()
            stripe.max_network_retries = 1
            self.stripe_configured = True
        else:
            self.logger.warning(
                "Stripe secret key not configured - service will operate in mock mode"
            )

        self._webhook_handlers: Dict[str, Callable[[Dict[str, Any]], AfterCommit]] = {
            "payment_intent.succeeded": self._handle_payment_succeeded,
            "payment_intent.payment_failed": self._handle_payment_failed,
            "payment_intent.canceled": self._handle_payment_canceled,
            "charge.refunded": self._handle_charge_refunded,
        }

    @property
    def notification_service(self) -> NotificationService:
        if self._notification_service is None:
            self._notification_service = NotificationService(self.db)
        return self._notification_service

    def get_payment_config(self) -> Dict[str, Any]:
        return {
            "publishable_key": settings.stripe_publishable_key,
            "currency": settings.stripe_currency,
            "mock_mode": not self.stripe_configured,
        }

    # ------------------------------------------------------------------ #
    # Payment intents
    # ------------------------------------------------------------------ #

    @staticmethod
    def _mock_intent(lesson_id: str, status: str = "requires_payment_method") -> Dict[str, Any]:
        intent_id = f"mock_pi_{lesson_id}"
        return {"id": intent_id, "client_secret": f"{intent_id}_secret_mock", "status": status}

    @BaseService.measure_operation("stripe_create_payment_intent")
    def create_payment_intent(self, lesson: Lesson, instructor: Instructor) -> Dict[str, Any]:
        """
        Create a Stripe PaymentIntent for a lesson.

        Returns:
            Dict with id, client_secret and status of the intent

        Raises:
            ServiceException: If Stripe rejects the request
        """
        stripe_kwargs: Dict[str, Any] = {
            "amount": lesson.price_cents,
            "currency": settings.stripe_currency,
            "metadata": {"lesson_id": lesson.id, "platform": "sideout"},
            "automatic_payment_methods": {"enabled": True},
        }
        if instructor.stripe_account_id:
            stripe_kwargs["transfer_data"] = {"destination": instructor.stripe_account_id}
            stripe_kwargs["application_fee_amount"] = lesson.platform_fee_cents

        if not self.stripe_configured:
            self.logger.warning(f"Using mock payment intent for lesson {lesson.id}")
            return self._mock_intent(lesson.id)

        try:
            intent = stripe.PaymentIntent.create(
                **stripe_kwargs, idempotency_key=f"lesson:{lesson.id}:intent"
            )
        except stripe.StripeError as e:
            self.logger.error(f"Stripe error creating payment intent: {str(e)}")
            raise ExternalServiceException(
                f"Failed to create payment intent: {str(e)}", code="PAYMENT_PROVIDER_ERROR"
            )

        self.logger.info(f"Created payment intent {intent.id} for lesson {lesson.id}")
        return {"id": intent.id, "client_secret": intent.client_secret, "status": intent.status}

    @BaseService.measure_operation("stripe_retrieve_payment_intent")
    def retrieve_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
        if not self.stripe_configured:
            lesson_id = payment_intent_id.replace("mock_pi_", "", 1)
            return self._mock_intent(lesson_id)
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            self.logger.error(f"Stripe error retrieving payment intent: {str(e)}")
            raise ExternalServiceException(
                f"Failed to retrieve payment intent: {str(e)}", code="PAYMENT_PROVIDER_ERROR"
            )
        return {"id": intent.id, "client_secret": intent.client_secret, "status": intent.status}

    @BaseService.measure_operation("stripe_cancel_payment_intent")
    def cancel_payment_intent(self, payment_intent_id: str) -> str:
        """
        Cancel a PaymentIntent so it can no longer be paid.

        Returns:
            The new intent status
        """
        if not self.stripe_configured:
            self.logger.warning(f"Mock cancel of payment intent {payment_intent_id}")
            return "canceled"
        try:
            intent = stripe.PaymentIntent.cancel(payment_intent_id)
        except stripe.StripeError as e:
            self.logger.error(f"Stripe error canceling payment intent: {str(e)}")
            raise ExternalServiceException(
                f"Failed to cancel payment intent: {str(e)}", code="PAYMENT_PROVIDER_ERROR"
            )
        return intent.status

    @BaseService.measure_operation("stripe_refund_payment")
    def refund_payment(self, lesson: Lesson, amount_cents: Optional[int] = None) -> Dict[str, Any]:
        """
        Refund a lesson's payment, in full unless an amount is given.

        The local Payment row is updated from the charge.refunded webhook.
        """
        amount = amount_cents if amount_cents is not None else lesson.price_cents
        if not lesson.payment_intent_id:
            raise ServiceException("Lesson has no payment to refund", code="NO_PAYMENT_INTENT")

        if not self.stripe_configured:
            self.logger.warning(f"Mock refund of {amount} cents for lesson {lesson.id}")
            return {"id": f"mock_re_{lesson.id}", "amount": amount, "status": "succeeded"}

        refund_kwargs: Dict[str, Any] = {
            "payment_intent": lesson.payment_intent_id,
            "amount": amount,
            "metadata": {"lesson_id": lesson.id},
        }
        if lesson.instructor and lesson.instructor.stripe_account_id:
            refund_kwargs["reverse_transfer"] = True
            refund_kwargs["refund_application_fee"] = True

        idempotency_key = f"lesson:{lesson.id}:refund:{lesson.payment_intent_id}:{amount}"
        try:
            refund = stripe.Refund.create(**refund_kwargs, idempotency_key=idempotency_key)
        except stripe.StripeError as e:
            self.logger.error(f"Stripe error refunding lesson {lesson.id}: {str(e)}")
            raise ExternalServiceException(
                f"Failed to refund payment: {str(e)}", code="REFUND_FAILED"
            )

        self.logger.info(f"Refunded {amount} cents for lesson {lesson.id}: {refund.id}")
        return {"id": refund.id, "amount": refund.amount, "status": refund.status}

    def record_payment_intent(self, lesson: Lesson, intent: Dict[str, Any]) -> Payment:
        """Store the intent on the lesson and in the payment ledger (caller commits)."""
        lesson.payment_intent_id = intent["id"]
        lesson.payment_status = intent["status"]
        payment = self.payment_repository.get_by_intent_id(intent["id"])
        if payment is None:
            payment = self.payment_repository.create(
                lesson_id=lesson.id,
                stripe_payment_intent_id=intent["id"],
                amount_cents=lesson.price_cents,
                application_fee_cents=lesson.platform_fee_cents,
                currency=settings.stripe_currency,
                status=intent["status"],
            )
        return payment

    # ------------------------------------------------------------------ #
    # Webhooks
    # ------------------------------------------------------------------ #

    def construct_webhook_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Verify the Stripe-Signature header and parse the event.

        Raises:
            ValidationException: Missing header, bad signature or bad payload
            ServiceException: Webhook secret not configured
        """
        if not signature:
            raise ValidationException("Missing Stripe-Signature header", code="MISSING_SIGNATURE")
        if not settings.stripe_webhook_secret:
            raise ServiceException("Webhook secret not configured")

        try:
            stripe.Webhook.construct_event(
                payload, signature, settings.stripe_webhook_secret.get_secret_value()
            )
        except stripe.SignatureVerificationError:
            self.logger.warning("Invalid webhook signature")
            raise ValidationException("Invalid webhook signature", code="INVALID_SIGNATURE")
        except ValueError as e:
            self.logger.warning(f"Invalid webhook payload: {str(e)}")
            raise ValidationException("Invalid webhook payload", code="INVALID_PAYLOAD")

        return json.loads(payload)

    @BaseService.measure_operation("stripe_handle_webhook")
    def handle_webhook_event(self, event: Dict[str, Any]) -> Dict[str, str]:
        """
        Process a verified webhook event exactly once.

        Refunds owed by a handler run before the event is recorded, so a refund
        that fails leaves the event as failed for Stripe to redeliver. Emails
        go out after commit.

        Returns:
            {"status": processed | ignored | duplicate, "event_type": ...}

        Raises:
            ServiceException: Processing failed; the event is recorded as failed
                and Stripe's retry will process it again
        """
        event_id = event.get("id", "")
        event_type = event.get("type", "")

        existing = self.webhook_event_repository.get_by_event_id(event_id)
        if existing is not None and existing.status != "failed":
            self.logger.info(f"Skipping duplicate webhook event {event_id}")
            prometheus_metrics.record_webhook_event(event_type, "duplicate")
            return {"status": "duplicate", "event_type": event_type}

        handler = self._webhook_handlers.get(event_type)
        outcome = "processed" if handler else "ignored"
        after_commit: AfterCommit = None

        try:
            with self.transaction():
                if handler is not None:
                    after_commit = handler(event["data"]["object"])
                self._record_event(existing, event_id, event_type, outcome)
        except Exception as e:
            self.logger.error(f"Error processing webhook event {event_id}: {str(e)}")
            with self.transaction():
                self._record_event(
                    self.webhook_event_repository.get_by_event_id(event_id),
                    event_id,
                    event_type,
                    "failed",
                    error=str(e),
                )
            prometheus_metrics.record_webhook_event(event_type, "failed")
            raise ServiceException(f"Failed to process webhook event: {str(e)}")

        if handler is None:
            self.logger.info(f"Unhandled webhook event type: {event_type}")
        if after_commit is not None:
            after_commit()

        prometheus_metrics.record_webhook_event(event_type, outcome)
        return {"status": outcome, "event_type": event_type}

    def _record_event(
        self,
        existing: Any,
        event_id: str,
        event_type: str,
        status: str,
        error: Optional[str] = None,
    ) -> None:
        if existing is None:
            self.webhook_event_repository.create(
                event_id=event_id, event_type=event_type, status=status, error=error
            )
        else:
            existing.status = status
            existing.error = error
            existing.processed_at = datetime.now(timezone.utc)
            self.db.flush()

    def _find_lesson(self, intent: Dict[str, Any]) -> Optional[Lesson]:
        lesson = self.lesson_repository.get_by_payment_intent_id(intent["id"])
        if lesson is None:
            lesson_id = (intent.get("metadata") or {}).get("lesson_id")
            if lesson_id:
                lesson = self.lesson_repository.get_by_id(lesson_id)
        if lesson is None:
            self.logger.warning(f"No lesson found for payment intent {intent['id']}")
        return lesson

    def _set_payment_status(self, payment_intent_id: str, status: str) -> None:
        payment = self.payment_repository.get_by_intent_id(payment_intent_id)
        if payment is not None:
            payment.status = status

    def _handle_payment_succeeded(self, intent: Dict[str, Any]) -> AfterCommit:
        self._set_payment_status(intent["id"], "succeeded")
        lesson = self._find_lesson(intent)
        if lesson is None:
            return None

        # Found by metadata when the lesson points at an older intent
        self.record_payment_intent(lesson, {"id": intent["id"], "status": "succeeded"})
        if lesson.status != LessonStatus.PENDING.value:
            if lesson.status == LessonStatus.CANCELLED.value:
                # Paid after the hold expired or the student cancelled
                self.logger.warning(f"Payment succeeded for cancelled lesson {lesson.id}")
                self.refund_payment(lesson)
            return None

        clashes = ConflictChecker(self.db, self.lesson_repository).check_instructor_conflicts(
            lesson.instructor_id,
            lesson.lesson_date,
            lesson.start_time,
            lesson.end_time,
            exclude_lesson_id=lesson.id,
        )
        now = datetime.now(timezone.utc)
        if clashes:
            self.logger.warning(f"Lesson {lesson.id} was paid after its slot was rebooked")
            lesson.status = LessonStatus.CANCELLED.value
            lesson.cancelled_at = now
            lesson.cancellation_reason = "Slot no longer available when payment completed"
            self.refund_payment(lesson)
            return None

        lesson.status = LessonStatus.CONFIRMED.value
        lesson.confirmed_at = now
        self.db.flush()
        self.logger.info(f"Lesson {lesson.id} confirmed by payment {intent['id']}")
        return lambda: self.notification_service.send_lesson_confirmed(lesson)

    def _handle_payment_failed(self, intent: Dict[str, Any]) -> AfterCommit:
        self._set_payment_status(intent["id"], "failed")
        lesson = self._find_lesson(intent)
        if lesson is not None:
            lesson.payment_status = "failed"
            self.logger.info(f"Payment failed for lesson {lesson.id}; it stays pending")
        return None

    def _handle_payment_canceled(self, intent: Dict[str, Any]) -> AfterCommit:
        self._set_payment_status(intent["id"], "canceled")
        lesson = self._find_lesson(intent)
        if lesson is None:
            return None
        lesson.payment_status = "canceled"
        if lesson.status == LessonStatus.PENDING.value:
            lesson.status = LessonStatus.CANCELLED.value
            lesson.cancelled_at = datetime.now(timezone.utc)
            lesson.cancellation_reason = lesson.cancellation_reason or "Payment canceled"
        return None

    def _handle_charge_refunded(self, charge: Dict[str, Any]) -> AfterCommit:
        payment_intent_id = charge.get("payment_intent")
        if not payment_intent_id:
            return None
        fully_refunded = bool(charge.get("refunded"))
        status = "refunded" if fully_refunded else "partially_refunded"

        payment = self.payment_repository.get_by_intent_id(payment_intent_id)
        if payment is not None:
            payment.refunded_amount_cents = int(charge.get("amount_refunded") or 0)
            payment.status = status
            refunds = (charge.get("refunds") or {}).get("data") or []
            if refunds:
                payment.stripe_refund_id = refunds[0].get("id")

        lesson = self.lesson_repository.get_by_payment_intent_id(payment_intent_id)
        if lesson is not None:
            lesson.payment_status = status
        self.logger.info(f"Charge {charge.get('id')} refunded ({status})")
        return None
