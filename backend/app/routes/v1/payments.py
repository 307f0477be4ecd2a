# backend/app/routes/v1/payments.py
"""
Payment routes - API v1

Endpoints:
    GET /config              → Publishable key and currency for the client
    POST /webhooks           → Stripe webhook receiver (signature verified)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from ...api.dependencies.services import get_stripe_service
from ...schemas.payment import PaymentConfigResponse, WebhookResponse
from ...services.stripe_service import StripeService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["payments-v1"])


@router.get("/config", response_model=PaymentConfigResponse)
def get_payment_config(
    stripe_service: StripeService = Depends(get_stripe_service),
) -> PaymentConfigResponse:
    return PaymentConfigResponse(**stripe_service.get_payment_config())


@router.post("/webhooks", response_model=WebhookResponse)
async def handle_stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    stripe_service: StripeService = Depends(get_stripe_service),
) -> WebhookResponse:
    """
    Receive a Stripe event.

    The raw body is verified against the Stripe-Signature header before any
    processing. Each event id is handled once; redeliveries report
    "duplicate". A processing failure returns 500 so Stripe retries.
    """
    payload = await request.body()
    event = stripe_service.construct_webhook_event(payload, stripe_signature)
    logger.info(f"Received Stripe webhook {event.get('type')} ({event.get('id')})")
    result = stripe_service.handle_webhook_event(event)
    return WebhookResponse(**result)
