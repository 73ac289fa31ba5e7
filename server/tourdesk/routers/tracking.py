"""Visitor tracking beacon router."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..core.middleware import get_client_ip
from ..schemas.tracking import TrackingAck, TrackingEvent
from ..services.tracking_service import TrackingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["tracking"])


@router.post("/track", response_model=TrackingAck)
async def track(
    event: TrackingEvent,
    request: Request,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Record a page view or refresh an active session (heartbeat)."""
    try:
        event_type = await TrackingService(db).track(
            event,
            client_ip=get_client_ip(request),
            header_user_agent=request.headers.get("user-agent"),
        )
        return JSONResponse(status_code=200, content=TrackingAck(type=event_type).model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error recording tracking event",
            extra={"page_path": event.page_path, "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e
