"""Payment router: Stripe payment intents and webhooks."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.payment import CreatePaymentIntentRequest, PaymentIntent, WebhookAck
from ..services.payment_service import PaymentGateway, PaymentService, get_payment_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/payments", tags=["payments"])

GATEWAY_DEPENDENCY = Depends(get_payment_gateway)


@router.post("/intent", response_model=PaymentIntent)
async def create_payment_intent(
    request: CreatePaymentIntentRequest,
    db: AsyncSession = DatabaseSession,
    gateway: PaymentGateway = GATEWAY_DEPENDENCY,
) -> JSONResponse:
    """Create a Stripe payment intent for the stored total of a booking."""
    payment_service = PaymentService(db, gateway)

    try:
        intent = await payment_service.create_payment_intent(request.booking_id)
        return JSONResponse(status_code=200, content=intent.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error creating payment intent",
            extra={"booking_id": str(request.booking_id), "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
    db: AsyncSession = DatabaseSession,
    gateway: PaymentGateway = GATEWAY_DEPENDENCY,
) -> JSONResponse:
    """
    Receive Stripe events.

    The raw body is verified against the configured webhook secret before any
    booking is touched.
    """
    payment_service = PaymentService(db, gateway)
    payload = await request.body()

    try:
        event = await payment_service.verify_event(payload, stripe_signature)
        event_type = await payment_service.handle_event(event)
        return JSONResponse(
            status_code=200,
            content=WebhookAck(event_type=event_type).model_dump(mode="json", by_alias=True),
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error handling Stripe webhook", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e
