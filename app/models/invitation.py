from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base
from app.utils.dates import utcnow


class Invitation(Base):
    """
    Guest invitation addressed by a unique slug.

    `view_count` is never stored: it is derived by joining `analytics`
    rows of type 'view' (see AnalyticsService / InvitationService).
    """

    __tablename__ = "invitations"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(100), nullable=False, unique=True, index=True)

    # Guest information
    name = Column(String(100), nullable=False)
    lastname = Column(String(100), nullable=True)
    secondary_name = Column(String(100), nullable=True)
    secondary_lastname = Column(String(100), nullable=True)
    number_of_passes = Column(Integer, nullable=False, default=1, server_default="1")

    # Status
    is_confirmed = Column(Boolean, nullable=False, default=False, server_default="0")
    is_active = Column(Boolean, nullable=False, default=True, server_default="1")

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now())

    events = relationship("AnalyticsEvent", back_populates="invitation", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Invitation id={self.id} slug={self.slug} confirmed={self.is_confirmed}>"
