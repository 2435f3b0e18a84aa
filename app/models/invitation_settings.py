from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.core.database import Base
from app.utils.dates import utcnow


class InvitationSettings(Base):
    """Global event settings shared by every invitation. The latest row wins."""

    __tablename__ = "invitation_settings"

    id = Column(Integer, primary_key=True, index=True)

    # Event
    event_date = Column(String(10), nullable=True)  # YYYY-MM-DD
    event_time = Column(String(5), nullable=True)  # HH:MM

    # RSVP window
    rsvp_enabled = Column(Boolean, nullable=False, default=True, server_default="1")
    rsvp_deadline = Column(String(10), nullable=True)
    rsvp_phone = Column(String(30), nullable=True)
    rsvp_whatsapp = Column(String(30), nullable=True)

    # Publishing
    is_published = Column(Boolean, nullable=False, default=False, server_default="0")
    thank_you_page_enabled = Column(Boolean, nullable=False, default=False, server_default="0")

    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now())
