from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class DashboardTotals(BaseModel):
    invitations: int
    rsvps: int
    views: int
    pending_rsvps: int


class DashboardRecent(BaseModel):
    views_last_7_days: int
    rsvps_last_7_days: int


class TopInvitation(BaseModel):
    slug: str
    name: str
    lastname: Optional[str] = None
    view_count: int

    model_config = ConfigDict(from_attributes=True)


class StatisticsResponse(BaseModel):
    """Headline numbers for the admin dashboard"""
    totals: DashboardTotals
    recent: DashboardRecent
    top_invitations: List[TopInvitation]

    model_config = ConfigDict(from_attributes=True)
