from datetime import timedelta

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.analytics_event import EVENT_VIEW, AnalyticsEvent
from app.models.invitation import Invitation
from app.schemas.statistics import DashboardRecent, DashboardTotals, StatisticsResponse, TopInvitation
from app.services.analytics_service import AnalyticsService
from app.utils.dates import utcnow

logger = get_logger("services.statistics")

TOP_INVITATIONS_LIMIT = 5
RECENT_DAYS = 7


class StatisticsService:
    def __init__(self, db: Session):
        self.db = db

    def _count_invitations(self, *criteria) -> int:
        return (
            self.db.query(func.count(Invitation.id))
            .filter(Invitation.is_active.is_(True), *criteria)
            .scalar() or 0
        )

    def _count_viewed_invitations(self, since=None) -> int:
        query = self.db.query(func.count(func.distinct(AnalyticsEvent.invitation_id))).filter(
            AnalyticsEvent.event_type == EVENT_VIEW
        )
        if since is not None:
            query = query.filter(AnalyticsEvent.timestamp >= since)
        return query.scalar() or 0

    def get_dashboard_statistics(self) -> StatisticsResponse:
        """
        Headline numbers for the admin landing page:
        - totals: active invitations, confirmed, distinct invitations viewed, pending
        - recent (last 7 days): distinct invitations viewed, confirmations updated
        - the five most viewed active invitations
        """
        logger.info("Fetching dashboard statistics")

        try:
            since = utcnow() - timedelta(days=RECENT_DAYS)

            totals = DashboardTotals(
                invitations=self._count_invitations(),
                rsvps=self._count_invitations(Invitation.is_confirmed.is_(True)),
                views=self._count_viewed_invitations(),
                pending_rsvps=self._count_invitations(Invitation.is_confirmed.is_(False)),
            )

            recent_confirmations = (
                self.db.query(func.count(Invitation.id))
                .filter(Invitation.is_confirmed.is_(True), Invitation.updated_at >= since)
                .scalar() or 0
            )
            recent = DashboardRecent(
                views_last_7_days=self._count_viewed_invitations(since),
                rsvps_last_7_days=recent_confirmations,
            )

            top = AnalyticsService(self.db).top_invitations_by_views(TOP_INVITATIONS_LIMIT)

            logger.info(
                f"Statistics fetched: invitations={totals.invitations}, "
                f"confirmed={totals.rsvps}, viewed={totals.views}"
            )
            return StatisticsResponse(
                totals=totals,
                recent=recent,
                top_invitations=[TopInvitation(**row) for row in top],
            )

        except Exception as e:
            logger.error(f"Error fetching dashboard statistics: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to fetch dashboard statistics: {str(e)}",
            )
