"""Stripe payment flow: settings, payment intents and webhook events."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

import stripe
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import (
    PaymentConfigurationError,
    PaymentProviderError,
    ValidationError,
)
from ..core.observability import metrics_collector
from ..models.booking import OPEN_STATUSES, Booking, BookingStatus
from ..schemas.payment import PaymentIntent
from ..schemas.settings import StripePaymentMethods, StripeSettings, UpdateStripeSettingsRequest
from .booking_service import BookingService
from .settings_service import SiteSettingsService
from .tour_service import TourService, resolve_tour_title

logger = logging.getLogger(__name__)

STRIPE_SETTINGS_KEY = "stripe"

ZERO_DECIMAL_CURRENCIES = frozenset({
    "BIF", "CLP", "DJF", "GNF", "JPY", "KMF", "KRW", "MGA",
    "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
})

# Secret fields and the prefix shown before the last four characters
MASKED_FIELDS = {
    "test_secret_key": "sk_test_...",
    "live_secret_key": "sk_live_...",
    "webhook_secret": "whsec_...",
}


def to_stripe_amount(amount: float, currency: str) -> int:
    """Amount in the currency's smallest unit."""
    if currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return int(round(amount))
    return int(round(amount * 100))


def from_stripe_amount(amount: int, currency: str) -> float:
    if currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return float(amount)
    return amount / 100


def payment_method_types(methods: StripePaymentMethods) -> list[str]:
    """Stripe payment method types for the enabled toggles; card covers the wallets."""
    types = []
    if methods.card:
        types.append("card")
    if methods.promptpay:
        types.append("promptpay")
    return types or ["card"]


def mask_secret(value: str, prefix: str) -> str:
    if not value:
        return ""
    return f"{prefix}{value[-4:]}"


def mask_stripe_settings(stripe_settings: StripeSettings) -> StripeSettings:
    masked = stripe_settings.model_copy()
    for field, prefix in MASKED_FIELDS.items():
        setattr(masked, field, mask_secret(getattr(stripe_settings, field), prefix))
    return masked


@dataclass
class ActiveStripeKeys:
    publishable_key: str
    secret_key: str
    webhook_secret: str
    payment_methods: StripePaymentMethods
    mode: str


@dataclass
class CreatedIntent:
    id: str
    client_secret: str


class PaymentGateway:
    """Thin wrapper over the Stripe SDK calls this service makes."""

    async def create_payment_intent(
        self,
        secret_key: str,
        amount: int,
        currency: str,
        payment_method_types: list[str],
        metadata: dict[str, str],
        receipt_email: str,
        description: str,
    ) -> CreatedIntent:
        client = stripe.StripeClient(secret_key, http_client=stripe.HTTPXClient())
        intent = await client.v1.payment_intents.create_async(
            params={
                "amount": amount,
                "currency": currency.lower(),
                "payment_method_types": payment_method_types,
                "metadata": metadata,
                "receipt_email": receipt_email,
                "description": description,
            }
        )
        return CreatedIntent(id=intent.id, client_secret=intent.client_secret)

    def verify_webhook(self, payload: bytes, signature: str, webhook_secret: str) -> dict[str, Any]:
        """Check the Stripe-Signature header and return the decoded event."""
        text = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(
            text, signature, webhook_secret, tolerance=stripe.Webhook.DEFAULT_TOLERANCE
        )
        return json.loads(text)


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway()


class PaymentService:
    """Service for payment operations."""

    def __init__(self, db: AsyncSession, gateway: PaymentGateway):
        self.db = db
        self.gateway = gateway
        self.site_settings = SiteSettingsService(db)
        self.booking_service = BookingService(db)
        self.tour_service = TourService(db)

    async def get_stripe_settings(self) -> StripeSettings:
        return await self.site_settings.get_model(STRIPE_SETTINGS_KEY, StripeSettings)

    async def update_stripe_settings(self, request: UpdateStripeSettingsRequest) -> StripeSettings:
        """
        Apply a settings update.

        Secrets sent back in their masked form keep the stored value.
        """
        current = await self.get_stripe_settings()
        updates = request.model_dump(exclude_unset=True)

        for field, prefix in MASKED_FIELDS.items():
            incoming = updates.get(field)
            if incoming is not None and incoming.startswith(prefix):
                updates.pop(field)

        merged = StripeSettings.model_validate({**current.model_dump(), **updates})
        await self.site_settings.set_value(STRIPE_SETTINGS_KEY, merged.model_dump())

        logger.info(
            "Stripe settings updated",
            extra={"mode": merged.mode, "fields": sorted(updates.keys())}
        )
        return merged

    async def get_active_keys(self) -> Optional[ActiveStripeKeys]:
        """Keys for the current mode, falling back to the environment; None when incomplete."""
        stored = await self.get_stripe_settings()
        live = stored.mode == "live"

        publishable = (stored.live_publishable_key if live else stored.test_publishable_key) \
            or settings.stripe_publishable_key
        secret = (stored.live_secret_key if live else stored.test_secret_key) or settings.stripe_secret_key
        webhook_secret = stored.webhook_secret or settings.stripe_webhook_secret

        if not publishable or not secret:
            return None

        return ActiveStripeKeys(
            publishable_key=publishable,
            secret_key=secret,
            webhook_secret=webhook_secret,
            payment_methods=stored.payment_methods,
            mode=stored.mode,
        )

    async def create_payment_intent(self, booking_id: UUID) -> PaymentIntent:
        """
        Start a Stripe payment for a booking's stored total.

        Raises:
            NotFoundError: If the booking does not exist
            ValidationError: If the booking is not awaiting payment
            PaymentConfigurationError: If Stripe keys are missing
            PaymentProviderError: If Stripe rejects the request
        """
        keys = await self.get_active_keys()
        if keys is None:
            logger.error("Payment intent requested but Stripe is not configured")
            raise PaymentConfigurationError()

        booking = await self.booking_service.get_booking_by_id_or_raise(booking_id)
        if booking.status not in OPEN_STATUSES:
            raise ValidationError(
                detail=f"Booking {booking.reference} is not awaiting payment",
                errors={"status": booking.status},
            )

        tour = await self.tour_service.get_tour_by_id_or_raise(booking.tour_id)
        tour_name = resolve_tour_title(tour, booking.language)
        methods = payment_method_types(keys.payment_methods)

        try:
            intent = await self.gateway.create_payment_intent(
                secret_key=keys.secret_key,
                amount=to_stripe_amount(booking.total_retail, booking.currency),
                currency=booking.currency,
                payment_method_types=methods,
                metadata={
                    "booking_id": str(booking.id),
                    "booking_reference": booking.reference,
                    "tour_name": tour_name,
                    "customer_name": booking.customer_name,
                    "mode": keys.mode,
                },
                receipt_email=booking.customer_email,
                description=f"Booking {booking.reference} - {tour_name}",
            )
        except stripe.StripeError as e:
            logger.error(
                "Stripe rejected payment intent",
                extra={"booking_id": str(booking.id), "error": str(e), "code": e.code}
            )
            raise PaymentProviderError(
                detail=e.user_message or "The payment could not be started",
                provider_code=e.code,
            )

        booking.stripe_payment_intent_id = intent.id
        booking.status = BookingStatus.PENDING_PAYMENT.value
        await self.db.commit()

        metrics_collector.record_payment_intent(booking.currency)
        logger.info(
            "Payment intent created",
            extra={
                "booking_id": str(booking.id),
                "payment_intent_id": intent.id,
                "amount": booking.total_retail,
                "currency": booking.currency,
                "mode": keys.mode,
            }
        )

        return PaymentIntent(
            client_secret=intent.client_secret,
            payment_intent_id=intent.id,
            publishable_key=keys.publishable_key,
            payment_methods=methods,
            amount=booking.total_retail,
            currency=booking.currency,
        )

    async def verify_event(self, payload: bytes, signature: Optional[str]) -> dict[str, Any]:
        """
        Verify a webhook delivery.

        Raises:
            ValidationError: If the signature header is missing or invalid
            PaymentConfigurationError: If no webhook secret is configured
        """
        if not signature:
            raise ValidationError(detail="Missing stripe-signature header")

        keys = await self.get_active_keys()
        if keys is None or not keys.webhook_secret:
            logger.error("Stripe webhook received but no webhook secret is configured")
            raise PaymentConfigurationError(detail="Webhook not configured")

        try:
            return self.gateway.verify_webhook(payload, signature, keys.webhook_secret)
        except (stripe.SignatureVerificationError, ValueError) as e:
            logger.warning("Webhook signature verification failed", extra={"error": str(e)})
            raise ValidationError(detail="Invalid signature")

    async def _booking_for_intent(self, intent: dict[str, Any]) -> Optional[Booking]:
        booking_id = (intent.get("metadata") or {}).get("booking_id")
        if booking_id:
            try:
                booking = await self.booking_service.get_booking_by_id(UUID(booking_id))
            except ValueError:
                booking = None
            if booking is not None:
                return booking
        if intent.get("id"):
            return await self.booking_service.get_booking_by_payment_intent(intent["id"])
        return None

    async def handle_event(self, event: dict[str, Any]) -> str:
        """
        Apply a verified Stripe event to its booking.

        Returns:
            The event type
        """
        event_type = event.get("type", "unknown")
        intent = (event.get("data") or {}).get("object") or {}
        metrics_collector.record_webhook_event(event_type)

        if event_type not in (
            "payment_intent.succeeded",
            "payment_intent.payment_failed",
            "payment_intent.canceled",
        ):
            logger.info("Unhandled Stripe event", extra={"event_type": event_type})
            return event_type

        booking = await self._booking_for_intent(intent)
        if booking is None:
            logger.warning(
                "Stripe event for unknown booking",
                extra={"event_type": event_type, "payment_intent_id": intent.get("id")}
            )
            return event_type

        if event_type == "payment_intent.succeeded":
            await self.booking_service.transition_status(booking, BookingStatus.CONFIRMED, source="stripe")
        elif event_type == "payment_intent.payment_failed":
            error = intent.get("last_payment_error") or {}
            message = error.get("message") or "unknown error"
            note = f"Payment failed: {message}"
            booking.notes = f"{booking.notes}\n{note}" if booking.notes else note
        else:
            await self.booking_service.transition_status(booking, BookingStatus.CANCELLED, source="stripe")

        await self.db.commit()

        logger.info(
            "Stripe event applied",
            extra={
                "event_type": event_type,
                "booking_id": str(booking.id),
                "status": booking.status,
            }
        )
        return event_type
