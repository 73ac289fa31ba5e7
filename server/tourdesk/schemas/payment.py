"""Payment schemas."""

from typing import List
from uuid import UUID

from pydantic import Field

from .common import CamelModel


class CreatePaymentIntentRequest(CamelModel):
    booking_id: UUID = Field(..., description="Booking to pay for")


class PaymentIntent(CamelModel):
    """What the browser needs to confirm the payment."""

    client_secret: str
    payment_intent_id: str
    publishable_key: str
    payment_methods: List[str]
    amount: float
    currency: str


class WebhookAck(CamelModel):
    received: bool = True
    event_type: str
