"""
Analytics event schemas.

`event_data` is a tagged union keyed by `event_type`: each known event type
has its own payload model, and unknown types fall back to a free-form
payload. Unknown keys are preserved on every variant.
"""
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from app.models.analytics_event import (
    EVENT_MESSAGE,
    EVENT_RSVP_ACTION_ERROR,
    EVENT_RSVP_ACTION_EXCEPTION,
    EVENT_RSVP_ACTION_SUCCESS,
    EVENT_RSVP_BUTTON_CLICK,
    EVENT_VIEW,
)


class EventPayload(BaseModel):
    model_config = ConfigDict(extra="allow")


class ViewEventData(EventPayload):
    slug: Optional[str] = None
    page: Optional[str] = None
    referrer: Optional[str] = None


class RsvpButtonClickData(EventPayload):
    slug: Optional[str] = None
    action: Optional[str] = None


class RsvpActionSuccessData(EventPayload):
    slug: str
    action: Literal["confirm", "unconfirm"]
    is_confirmed: Optional[bool] = None
    timestamp: Optional[datetime] = None
    source: Optional[str] = None


class RsvpActionErrorData(EventPayload):
    slug: Optional[str] = None
    action: Optional[str] = None
    error: Optional[str] = None


class MessageEventData(EventPayload):
    guest_name: Optional[str] = Field(None, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)


class GenericEventData(EventPayload):
    pass


EVENT_DATA_SCHEMAS: Dict[str, Type[EventPayload]] = {
    EVENT_VIEW: ViewEventData,
    EVENT_RSVP_BUTTON_CLICK: RsvpButtonClickData,
    EVENT_RSVP_ACTION_SUCCESS: RsvpActionSuccessData,
    EVENT_RSVP_ACTION_ERROR: RsvpActionErrorData,
    EVENT_RSVP_ACTION_EXCEPTION: RsvpActionErrorData,
    EVENT_MESSAGE: MessageEventData,
}


def payload_schema_for(event_type: str) -> Type[EventPayload]:
    return EVENT_DATA_SCHEMAS.get(event_type, GenericEventData)


def parse_event_data(event_type: str, data: Optional[Dict[str, Any]]) -> EventPayload:
    """Validate a raw payload against the schema of its event type (raises pydantic.ValidationError)."""
    return payload_schema_for(event_type).model_validate(data or {})


class AnalyticsEventCreate(BaseModel):
    event_type: str = Field(..., min_length=1, max_length=64)
    slug: Optional[str] = Field(None, max_length=100)
    invitation_id: Optional[int] = None
    event_data: Optional[Dict[str, Any]] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None


class AnalyticsEventResponse(BaseModel):
    id: int
    invitation_id: Optional[int] = None
    event_type: str
    event_data: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class HideMessageRequest(BaseModel):
    analytics_id: int = Field(..., gt=0)
