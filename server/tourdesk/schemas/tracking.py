"""Visitor tracking schemas."""

from enum import Enum
from typing import Optional

from pydantic import Field

from .common import CamelModel


class TrackingEventType(str, Enum):
    PAGEVIEW = "pageview"
    HEARTBEAT = "heartbeat"


class TrackingEvent(CamelModel):
    """Beacon sent by the storefront on page load and periodically while open."""

    page_path: Optional[str] = Field(None, max_length=1024)
    session_id: Optional[str] = Field(None, max_length=128)
    type: TrackingEventType = TrackingEventType.PAGEVIEW
    referrer: Optional[str] = None
    screen_width: Optional[int] = Field(None, ge=0)
    screen_height: Optional[int] = Field(None, ge=0)
    language: Optional[str] = None
    user_agent: Optional[str] = None


class TrackingAck(CamelModel):
    success: bool = True
    type: TrackingEventType
