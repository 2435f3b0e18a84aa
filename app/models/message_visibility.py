from sqlalchemy import Column, DateTime, ForeignKey, Integer
from sqlalchemy.sql import func

from app.core.database import Base
from app.utils.dates import utcnow


class MessageVisibility(Base):
    """Marker row: a guest message whose analytics id is present here is hidden."""

    __tablename__ = "message_visibility"

    analytics_id = Column(
        Integer,
        ForeignKey("analytics.id", ondelete="CASCADE"),
        primary_key=True,
    )
    hidden_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())
