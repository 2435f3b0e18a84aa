from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base
from app.utils.dates import utcnow

# Event types written by the public pages and the API
EVENT_VIEW = "view"
EVENT_RSVP_BUTTON_CLICK = "rsvp_button_click"
EVENT_RSVP_ACTION_SUCCESS = "rsvp_action_success"
EVENT_RSVP_ACTION_ERROR = "rsvp_action_error"
EVENT_RSVP_ACTION_EXCEPTION = "rsvp_action_exception"
EVENT_MESSAGE = "message"

RSVP_EVENT_TYPES = (
    EVENT_RSVP_BUTTON_CLICK,
    EVENT_RSVP_ACTION_SUCCESS,
    EVENT_RSVP_ACTION_ERROR,
    EVENT_RSVP_ACTION_EXCEPTION,
)
ACTIVITY_EVENT_TYPES = (EVENT_VIEW,) + RSVP_EVENT_TYPES


class AnalyticsEvent(Base):
    """Append-only analytics log. Rows are never updated."""

    __tablename__ = "analytics"

    id = Column(Integer, primary_key=True, index=True)

    # NULL when the event referenced a slug that did not resolve
    invitation_id = Column(
        Integer,
        ForeignKey("invitations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    event_type = Column(String(64), nullable=False, index=True)
    event_data = Column(JSON, nullable=True)

    ip_address = Column(String(100), nullable=True)
    user_agent = Column(Text, nullable=True)
    referrer = Column(Text, nullable=True)

    timestamp = Column(DateTime, nullable=False, default=utcnow, server_default=func.now(), index=True)

    invitation = relationship("Invitation", back_populates="events")

    def __repr__(self) -> str:
        return f"<AnalyticsEvent id={self.id} type={self.event_type} invitation={self.invitation_id}>"
