"""
Payment-related Pydantic schemas for the Sideout platform.

Stripe owns the payment intents; these models only describe what the API
hands back to the frontend.
"""

from typing import Literal, Optional

from pydantic import Field

from .base import StrictModel


class PaymentConfigResponse(StrictModel):
    """Public Stripe configuration for the checkout page."""

    publishable_key: Optional[str] = Field(None, description="Stripe publishable key")
    currency: str = Field(..., description="ISO currency code used for lessons")
    mock_mode: bool = Field(False, description="True when no Stripe secret key is configured")


class WebhookResponse(StrictModel):
    """Acknowledgement returned to Stripe after processing an event."""

    status: Literal["processed", "ignored", "duplicate", "failed"]
    event_type: str


__all__ = ["PaymentConfigResponse", "WebhookResponse"]
