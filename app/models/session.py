from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base
from app.utils.dates import utcnow


class Session(Base):
    """
    Login session record. Written at login time alongside the JWT; the token
    itself carries the expiry, so these rows are not consulted when
    validating requests.
    """

    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True)
    user_id = Column(Integer, ForeignKey("admin_users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())

    user = relationship("AdminUser", back_populates="sessions")
