"""
Models package - imports all models so SQLAlchemy can resolve relationships
and Base.metadata knows every table.
"""

from app.models.invitation import Invitation
from app.models.analytics_event import AnalyticsEvent
from app.models.message_visibility import MessageVisibility
from app.models.admin_user import AdminUser
from app.models.session import Session
from app.models.invitation_settings import InvitationSettings

__all__ = [
    "Invitation",
    "AnalyticsEvent",
    "MessageVisibility",
    "AdminUser",
    "Session",
    "InvitationSettings",
]
