"""Unit tests for the Stripe payment flow."""

import json

import pytest
import stripe

from tourdesk.core.exceptions import PaymentConfigurationError, PaymentProviderError, ValidationError
from tourdesk.models import BookingStatus
from tourdesk.schemas.booking import CreateBookingRequest, UpdateBookingRequest
from tourdesk.schemas.settings import StripePaymentMethods, StripeSettings, UpdateStripeSettingsRequest
from tourdesk.services.booking_service import BookingService
from tourdesk.services.payment_service import (
    PaymentService,
    from_stripe_amount,
    mask_secret,
    mask_stripe_settings,
    payment_method_types,
    to_stripe_amount,
)


async def create_booking(test_session, booking_payload):
    return await BookingService(test_session).create_booking(CreateBookingRequest.model_validate(booking_payload))


def intent_event(event_type: str, booking=None, intent_id: str = "pi_test_123", **intent_fields) -> dict:
    metadata = {"booking_id": str(booking.id)} if booking is not None else {}
    return {
        "id": "evt_1",
        "type": event_type,
        "data": {"object": {"id": intent_id, "metadata": metadata, **intent_fields}},
    }


def test_stripe_amounts():
    assert to_stripe_amount(3400, "THB") == 340000
    assert to_stripe_amount(19.99, "usd") == 1999
    assert to_stripe_amount(5000, "JPY") == 5000
    assert from_stripe_amount(1999, "USD") == 19.99
    assert from_stripe_amount(5000, "KRW") == 5000


def test_payment_method_types():
    assert payment_method_types(StripePaymentMethods()) == ["card", "promptpay"]
    assert payment_method_types(StripePaymentMethods(card=False, promptpay=True)) == ["promptpay"]
    assert payment_method_types(StripePaymentMethods(card=False, promptpay=False)) == ["card"]


def test_masking():
    assert mask_secret("sk_test_abcdef1234", "sk_test_...") == "sk_test_...1234"
    assert mask_secret("", "whsec_...") == ""

    masked = mask_stripe_settings(
        StripeSettings(test_publishable_key="pk_test_visible", test_secret_key="sk_test_abcd9876", webhook_secret="whsec_zz42")
    )
    assert masked.test_publishable_key == "pk_test_visible"
    assert masked.test_secret_key == "sk_test_...9876"
    assert masked.webhook_secret == "whsec_...zz42"
    assert masked.live_secret_key == ""


@pytest.mark.asyncio
async def test_masked_secrets_keep_stored_values(test_session, payment_gateway):
    service = PaymentService(test_session, payment_gateway)
    await service.update_stripe_settings(
        UpdateStripeSettingsRequest(test_publishable_key="pk_test_one", test_secret_key="sk_test_realsecret")
    )

    updated = await service.update_stripe_settings(
        UpdateStripeSettingsRequest(test_secret_key="sk_test_...cret", test_publishable_key="pk_test_two")
    )

    assert updated.test_secret_key == "sk_test_realsecret"
    assert updated.test_publishable_key == "pk_test_two"
    stored = await service.get_stripe_settings()
    assert stored.test_secret_key == "sk_test_realsecret"


@pytest.mark.asyncio
async def test_active_keys(test_session, payment_gateway, stripe_env):
    service = PaymentService(test_session, payment_gateway)

    keys = await service.get_active_keys()
    assert keys.secret_key == "sk_test_env1234"
    assert keys.mode == "test"

    await service.update_stripe_settings(
        UpdateStripeSettingsRequest(mode="live", live_publishable_key="pk_live_a", live_secret_key="sk_live_b")
    )
    keys = await service.get_active_keys()
    assert (keys.publishable_key, keys.secret_key, keys.mode) == ("pk_live_a", "sk_live_b", "live")
    assert keys.webhook_secret == "whsec_env1234"


@pytest.mark.asyncio
async def test_intent_requires_configuration(test_session, payment_gateway, booking_payload):
    booking = await create_booking(test_session, booking_payload)

    with pytest.raises(PaymentConfigurationError) as exc_info:
        await PaymentService(test_session, payment_gateway).create_payment_intent(booking.id)
    assert exc_info.value.problem_details["status"] == 503
    assert payment_gateway.intents == []


@pytest.mark.asyncio
async def test_create_payment_intent(test_session, payment_gateway, booking_payload, stripe_env):
    booking = await create_booking(test_session, booking_payload)

    intent = await PaymentService(test_session, payment_gateway).create_payment_intent(booking.id)

    assert intent.client_secret == "pi_test_123_secret_abc"
    assert intent.publishable_key == "pk_test_env1234"
    assert intent.amount == 3400
    assert intent.currency == "THB"
    assert intent.payment_methods == ["card", "promptpay"]

    sent = payment_gateway.intents[0]
    assert sent["amount"] == 340000
    assert sent["secret_key"] == "sk_test_env1234"
    assert sent["metadata"]["booking_id"] == str(booking.id)
    assert sent["receipt_email"] == "anna@example.com"

    stored = await BookingService(test_session).get_booking_by_id(booking.id)
    assert stored.stripe_payment_intent_id == "pi_test_123"


@pytest.mark.asyncio
async def test_intent_only_for_open_bookings(test_session, payment_gateway, booking_payload, stripe_env):
    booking = await create_booking(test_session, booking_payload)
    await BookingService(test_session).update_booking(booking.id, UpdateBookingRequest(status=BookingStatus.CONFIRMED))

    with pytest.raises(ValidationError):
        await PaymentService(test_session, payment_gateway).create_payment_intent(booking.id)


@pytest.mark.asyncio
async def test_provider_error_is_reported(test_session, payment_gateway, booking_payload, stripe_env, monkeypatch):
    booking = await create_booking(test_session, booking_payload)

    async def decline(**kwargs):
        raise stripe.CardError("Your card was declined.", param=None, code="card_declined")

    monkeypatch.setattr(payment_gateway, "create_payment_intent", decline)

    with pytest.raises(PaymentProviderError) as exc_info:
        await PaymentService(test_session, payment_gateway).create_payment_intent(booking.id)
    assert exc_info.value.problem_details["status"] == 402


@pytest.mark.asyncio
async def test_verify_event(test_session, payment_gateway, stripe_env):
    service = PaymentService(test_session, payment_gateway)
    payload = json.dumps({"type": "payment_intent.succeeded"}).encode()

    assert (await service.verify_event(payload, "valid"))["type"] == "payment_intent.succeeded"

    with pytest.raises(ValidationError):
        await service.verify_event(payload, None)
    with pytest.raises(ValidationError):
        await service.verify_event(payload, "t=1,v1=forged")


@pytest.mark.asyncio
async def test_verify_event_without_secret(test_session, payment_gateway):
    with pytest.raises(PaymentConfigurationError):
        await PaymentService(test_session, payment_gateway).verify_event(b"{}", "valid")


@pytest.mark.asyncio
async def test_succeeded_event_confirms_booking(test_session, payment_gateway, booking_payload, published_tour):
    booking = await create_booking(test_session, booking_payload)

    event_type = await PaymentService(test_session, payment_gateway).handle_event(
        intent_event("payment_intent.succeeded", booking)
    )

    assert event_type == "payment_intent.succeeded"
    stored = await BookingService(test_session).get_booking_by_id(booking.id)
    assert stored.status == BookingStatus.CONFIRMED.value


@pytest.mark.asyncio
async def test_event_found_by_intent_id(test_session, payment_gateway, booking_payload):
    booking = await create_booking(test_session, booking_payload)
    booking.stripe_payment_intent_id = "pi_lookup"
    await test_session.commit()

    await PaymentService(test_session, payment_gateway).handle_event(
        intent_event("payment_intent.canceled", intent_id="pi_lookup")
    )

    stored = await BookingService(test_session).get_booking_by_id(booking.id)
    assert stored.status == BookingStatus.CANCELLED.value


@pytest.mark.asyncio
async def test_failed_event_appends_note(test_session, payment_gateway, booking_payload):
    booking = await create_booking(test_session, booking_payload)
    service = PaymentService(test_session, payment_gateway)

    await service.handle_event(
        intent_event("payment_intent.payment_failed", booking, last_payment_error={"message": "Card expired"})
    )
    await service.handle_event(intent_event("payment_intent.payment_failed", booking))

    stored = await BookingService(test_session).get_booking_by_id(booking.id)
    assert stored.status == BookingStatus.PENDING_PAYMENT.value
    assert stored.notes == "Payment failed: Card expired\nPayment failed: unknown error"


@pytest.mark.asyncio
async def test_other_events_are_acknowledged(test_session, payment_gateway):
    service = PaymentService(test_session, payment_gateway)

    assert await service.handle_event({"type": "charge.refunded", "data": {"object": {}}}) == "charge.refunded"
    # unknown booking is logged, not raised
    assert await service.handle_event(intent_event("payment_intent.succeeded", intent_id="pi_nobody")) == (
        "payment_intent.succeeded"
    )
