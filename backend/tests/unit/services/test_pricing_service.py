"""Unit tests for PricingService."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.services.pricing_service import PricingService


@pytest.fixture
def pricing() -> PricingService:
    return PricingService(MagicMock(), fee_percentage=10)


def _instructor(rate_cents: int = 8000) -> SimpleNamespace:
    return SimpleNamespace(id="inst", hourly_rate_cents=rate_cents)


class TestQuote:
    def test_private_hour_is_the_hourly_rate(self, pricing):
        quote = pricing.quote(_instructor(), "private", 60, 1)

        assert quote.base_price_cents == 8000
        assert quote.price_cents == 8000
        assert quote.platform_fee_cents == 800
        assert quote.instructor_payout_cents == 7200

    def test_duration_scales_base_price(self, pricing):
        quote = pricing.quote(_instructor(), "private", 90, 1)
        assert quote.base_price_cents == 12000
        assert quote.price_cents == 12000

    def test_semi_private_multiplier(self, pricing):
        quote = pricing.quote(_instructor(), "semi_private", 90, 2)

        assert quote.base_price_cents == 12000
        assert quote.price_cents == 18000
        assert quote.platform_fee_cents == 1800
        assert quote.instructor_payout_cents == 16200

    def test_group_multiplier(self, pricing):
        quote = pricing.quote(_instructor(), "group", 120, 4)
        assert quote.price_cents == 32000
        assert quote.platform_fee_cents == 3200

    def test_rounds_half_cents_up(self, pricing):
        quote = pricing.quote(_instructor(8333), "private", 90, 1)
        assert quote.price_cents == 12500

    def test_payout_plus_fee_equals_price(self):
        service = PricingService(MagicMock(), fee_percentage=12.5)
        quote = service.quote(_instructor(7777), "semi_private", 120, 2)
        assert quote.platform_fee_cents + quote.instructor_payout_cents == quote.price_cents

    def test_zero_fee(self):
        quote = PricingService(MagicMock(), fee_percentage=0).quote(_instructor(), "private", 60, 1)
        assert quote.platform_fee_cents == 0
        assert quote.instructor_payout_cents == 8000

    def test_to_dict(self, pricing):
        assert pricing.quote(_instructor(), "private", 60, 1).to_dict() == {
            "base_price_cents": 8000,
            "price_cents": 8000,
            "platform_fee_cents": 800,
            "instructor_payout_cents": 7200,
        }


class TestValidateLessonShape:
    @pytest.mark.parametrize("duration", [30, 45, 75, 150])
    def test_rejects_unsupported_durations(self, duration):
        with pytest.raises(ValidationException) as exc:
            PricingService.validate_lesson_shape("private", duration, 1)
        assert exc.value.code == "INVALID_DURATION"

    def test_rejects_unknown_type(self):
        with pytest.raises(ValidationException) as exc:
            PricingService.validate_lesson_shape("clinic", 60, 1)
        assert exc.value.code == "INVALID_LESSON_TYPE"

    @pytest.mark.parametrize(
        "lesson_type,participants",
        [("private", 2), ("semi_private", 1), ("semi_private", 3), ("group", 2), ("group", 7)],
    )
    def test_rejects_participant_counts_outside_type(self, lesson_type, participants):
        with pytest.raises(ValidationException) as exc:
            PricingService.validate_lesson_shape(lesson_type, 60, participants)
        assert exc.value.code == "INVALID_PARTICIPANTS"

    @pytest.mark.parametrize(
        "lesson_type,participants", [("private", 1), ("semi_private", 2), ("group", 3), ("group", 6)]
    )
    def test_accepts_valid_shapes(self, lesson_type, participants):
        PricingService.validate_lesson_shape(lesson_type, 60, participants)


def test_quote_for_unknown_instructor_raises(pricing):
    pricing.instructor_repository = MagicMock()
    pricing.instructor_repository.get_by_id.return_value = None

    with pytest.raises(NotFoundException):
        pricing.quote_for_instructor_id("missing", "private", 60, 1)
