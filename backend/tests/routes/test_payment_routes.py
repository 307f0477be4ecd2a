"""Tests for /api/v1/payments."""

import json
from unittest.mock import patch

from fastapi.testclient import TestClient
import stripe


def test_payment_config(client: TestClient):
    response = client.get("/api/v1/payments/config")

    assert response.status_code == 200
    assert response.json()["currency"] == "usd"
    assert response.json()["mock_mode"] is True


def test_webhook_requires_signature(client: TestClient):
    response = client.post("/api/v1/payments/webhooks", content=b"{}")

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "MISSING_SIGNATURE"


def test_webhook_rejects_bad_signature(client: TestClient):
    with patch(
        "stripe.Webhook.construct_event",
        side_effect=stripe.SignatureVerificationError("bad", "sig"),
    ):
        response = client.post(
            "/api/v1/payments/webhooks", content=b"{}", headers={"Stripe-Signature": "sig"}
        )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_SIGNATURE"


def test_webhook_confirms_lesson(client: TestClient, db, make_lesson, lesson_date):
    lesson = make_lesson(lesson_date, status="PENDING", payment_intent_id="pi_route")
    payload = json.dumps(
        {
            "id": "evt_route",
            "type": "payment_intent.succeeded",
            "data": {"object": {"id": "pi_route", "metadata": {"lesson_id": lesson.id}}},
        }
    ).encode()

    with patch("stripe.Webhook.construct_event"):
        first = client.post(
            "/api/v1/payments/webhooks", content=payload, headers={"Stripe-Signature": "sig"}
        )
        second = client.post(
            "/api/v1/payments/webhooks", content=payload, headers={"Stripe-Signature": "sig"}
        )

    db.refresh(lesson)
    assert first.json() == {"status": "processed", "event_type": "payment_intent.succeeded"}
    assert second.json()["status"] == "duplicate"
    assert lesson.status == "CONFIRMED"
