from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy import and_, case, func, literal
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.analytics_event import (
    ACTIVITY_EVENT_TYPES,
    EVENT_RSVP_ACTION_SUCCESS,
    EVENT_VIEW,
    RSVP_EVENT_TYPES,
    AnalyticsEvent,
)
from app.models.invitation import Invitation
from app.schemas.analytics import AnalyticsEventCreate, parse_event_data
from app.utils.dates import last_local_days, resolve_timezone, utcnow
from app.utils.pagination import build_pagination, offset_for
from app.utils.text import couple_display_name, full_name

logger = get_logger("services.analytics")

DASHBOARD_LIST_SIZE = 10
DASHBOARD_DAYS = 7

TOP_STATE_VIEWED = "viewed"
TOP_STATE_NOT_VIEWED = "not_viewed"
TOP_STATUS_CONFIRMED = "confirmed"
TOP_STATUS_PENDING = "pending"


def log_event(
    db: Session,
    *,
    event_type: str,
    invitation_id: Optional[int] = None,
    data: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    referrer: Optional[str] = None,
) -> AnalyticsEvent:
    """
    Single write path for the analytics log.

    Runs inside the caller's transaction and does not commit, so a business
    change and the event describing it land together.
    """
    event = AnalyticsEvent(
        invitation_id=invitation_id,
        event_type=event_type,
        event_data=data,
        ip_address=ip_address,
        user_agent=user_agent,
        referrer=referrer,
        timestamp=utcnow(),
    )
    db.add(event)
    return event


def view_count_subquery(db: Session):
    """Per-invitation count of 'view' events, for outer-joining onto invitations."""
    return (
        db.query(
            AnalyticsEvent.invitation_id.label("invitation_id"),
            func.count(AnalyticsEvent.id).label("view_count"),
        )
        .filter(
            AnalyticsEvent.event_type == EVENT_VIEW,
            AnalyticsEvent.invitation_id.isnot(None),
        )
        .group_by(AnalyticsEvent.invitation_id)
        .subquery()
    )


def _activity_row(event: AnalyticsEvent, invitation: Optional[Invitation]) -> Dict[str, Any]:
    row = {
        "id": event.id,
        "timestamp": event.timestamp,
        "ip_address": event.ip_address,
        "user_agent": event.user_agent,
        "event_type": event.event_type,
        "event_data": event.event_data,
        "slug": None,
        "name": None,
        "lastname": None,
        "secondary_name": None,
        "secondary_lastname": None,
        "display_name": None,
    }
    if invitation is not None:
        row.update(
            slug=invitation.slug,
            name=invitation.name,
            lastname=invitation.lastname,
            secondary_name=invitation.secondary_name,
            secondary_lastname=invitation.secondary_lastname,
            display_name=couple_display_name(
                invitation.name,
                invitation.lastname,
                invitation.secondary_name,
                invitation.secondary_lastname,
            ),
        )
    return row


def _day_bucket(windows):
    """CASE expression labelling a timestamp with the local day it falls in."""
    return case(
        *[
            (
                and_(AnalyticsEvent.timestamp >= start, AnalyticsEvent.timestamp < end),
                literal(day.isoformat()),
            )
            for day, start, end in windows
        ],
        else_=None,
    )


class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def _resolve_invitation_id(self, invitation_id: Optional[int], slug: Optional[str]) -> Optional[int]:
        if invitation_id is not None:
            exists = self.db.query(Invitation.id).filter(Invitation.id == invitation_id).first()
            if exists:
                return invitation_id
            logger.info(f"Tracked event references unknown invitation id {invitation_id}")

        if slug:
            match = self.db.query(Invitation.id).filter(Invitation.slug == slug.strip().lower()).first()
            if match:
                return match.id
            logger.info(f"Tracked event references unknown slug '{slug}'")
        return None

    def track_event(
        self,
        event_data: AnalyticsEventCreate,
        ip_address: str,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
    ) -> AnalyticsEvent:
        """Record a client-side event. Unknown slugs are stored with a NULL invitation."""
        try:
            payload = parse_event_data(event_data.event_type, event_data.event_data).model_dump(
                mode="json", exclude_none=True
            ) or None
        except ValidationError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid event_data for '{event_data.event_type}': {e.errors()[0]['msg']}",
            )

        try:
            invitation_id = self._resolve_invitation_id(event_data.invitation_id, event_data.slug)
            event = log_event(
                self.db,
                event_type=event_data.event_type,
                invitation_id=invitation_id,
                data=payload,
                ip_address=ip_address,
                user_agent=user_agent or "unknown",
                referrer=referrer,
            )
            self.db.commit()
            self.db.refresh(event)
            logger.debug(f"Tracked {event.event_type} event {event.id} for invitation {invitation_id}")
            return event
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error tracking analytics event: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to track analytics event: {str(e)}",
            )

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def _count_views_since(self, since) -> int:
        query = self.db.query(func.count(AnalyticsEvent.id)).filter(AnalyticsEvent.event_type == EVENT_VIEW)
        if since is not None:
            query = query.filter(AnalyticsEvent.timestamp >= since)
        return query.scalar() or 0

    def _recent_events(self, event_types, limit: int) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(AnalyticsEvent, Invitation)
            .outerjoin(Invitation, AnalyticsEvent.invitation_id == Invitation.id)
            .filter(AnalyticsEvent.event_type.in_(event_types))
            .order_by(AnalyticsEvent.timestamp.desc(), AnalyticsEvent.id.desc())
            .limit(limit)
            .all()
        )
        return [_activity_row(event, invitation) for event, invitation in rows]

    def top_invitations_by_views(self, limit: int) -> List[Dict[str, Any]]:
        view_count = func.count(AnalyticsEvent.id).label("view_count")
        rows = (
            self.db.query(Invitation, view_count)
            .outerjoin(
                AnalyticsEvent,
                and_(
                    AnalyticsEvent.invitation_id == Invitation.id,
                    AnalyticsEvent.event_type == EVENT_VIEW,
                ),
            )
            .filter(Invitation.is_active.is_(True))
            .group_by(Invitation.id)
            .order_by(view_count.desc(), Invitation.created_at.desc(), Invitation.id.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": invitation.id,
                "slug": invitation.slug,
                "name": invitation.name,
                "lastname": invitation.lastname,
                "view_count": count,
            }
            for invitation, count in rows
        ]

    def _views_by_day(self, windows) -> List[Dict[str, Any]]:
        oldest_start = windows[-1][1]
        newest_end = windows[0][2]
        bucketed = (
            self.db.query(_day_bucket(windows).label("day"))
            .filter(
                AnalyticsEvent.event_type == EVENT_VIEW,
                AnalyticsEvent.timestamp >= oldest_start,
                AnalyticsEvent.timestamp < newest_end,
            )
            .subquery()
        )
        counts = dict(
            self.db.query(bucketed.c.day, func.count())
            .filter(bucketed.c.day.isnot(None))
            .group_by(bucketed.c.day)
            .all()
        )
        return [{"date": day.isoformat(), "count": counts.get(day.isoformat(), 0)} for day, _, _ in windows]

    def _confirmation_events(self, limit: int) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(
                AnalyticsEvent.id,
                AnalyticsEvent.timestamp,
                AnalyticsEvent.ip_address,
                AnalyticsEvent.user_agent,
                AnalyticsEvent.event_data["slug"].as_string().label("slug"),
                AnalyticsEvent.event_data["action"].as_string().label("action"),
            )
            .filter(AnalyticsEvent.event_type == EVENT_RSVP_ACTION_SUCCESS)
            .order_by(AnalyticsEvent.timestamp.desc(), AnalyticsEvent.id.desc())
            .limit(limit)
            .all()
        )
        return [dict(row._mapping) for row in rows]

    def _confirmations_by_day(self, windows) -> List[Dict[str, Any]]:
        oldest_start = windows[-1][1]
        newest_end = windows[0][2]
        bucketed = (
            self.db.query(
                _day_bucket(windows).label("day"),
                AnalyticsEvent.event_data["action"].as_string().label("action"),
            )
            .filter(
                AnalyticsEvent.event_type == EVENT_RSVP_ACTION_SUCCESS,
                AnalyticsEvent.timestamp >= oldest_start,
                AnalyticsEvent.timestamp < newest_end,
            )
            .subquery()
        )
        rows = (
            self.db.query(bucketed.c.day, bucketed.c.action, func.count().label("count"))
            .filter(bucketed.c.day.isnot(None))
            .group_by(bucketed.c.day, bucketed.c.action)
            .order_by(bucketed.c.day.desc(), bucketed.c.action)
            .all()
        )
        return [{"date": day, "action": action, "count": count} for day, action, count in rows]

    def get_dashboard(self, tz_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Aggregate analytics for the admin dashboard.

        Per-day series are bucketed by the caller's local calendar day:
        day boundaries are computed in the requested IANA zone and the
        grouping itself runs in SQL.
        """
        tz = resolve_timezone(tz_name)
        logger.info(f"Building analytics dashboard (tz={tz.key})")

        try:
            now = utcnow()
            windows = last_local_days(DASHBOARD_DAYS, tz, now=now)

            return {
                "timezone": tz.key,
                "total_views": self._count_views_since(None),
                "views_last_7_days": self._count_views_since(now - timedelta(days=7)),
                "views_last_30_days": self._count_views_since(now - timedelta(days=30)),
                "recent_views": self._recent_events((EVENT_VIEW,), DASHBOARD_LIST_SIZE),
                "recent_rsvp_events": self._recent_events(RSVP_EVENT_TYPES, DASHBOARD_LIST_SIZE),
                "top_invitations": self.top_invitations_by_views(DASHBOARD_LIST_SIZE),
                "views_by_day": self._views_by_day(windows),
                "confirmation_events": self._confirmation_events(DASHBOARD_LIST_SIZE),
                "recent_confirmations": self._confirmations_by_day(windows),
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error building analytics dashboard: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to fetch analytics dashboard: {str(e)}",
            )

    # ------------------------------------------------------------------
    # Paginated lists
    # ------------------------------------------------------------------

    def get_recent_activity(
        self,
        page: int = 1,
        limit: int = 50,
        event_type: Optional[str] = None,
        invite: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """Paginated feed of view and RSVP events, newest first."""
        query = (
            self.db.query(AnalyticsEvent, Invitation)
            .outerjoin(Invitation, AnalyticsEvent.invitation_id == Invitation.id)
            .filter(AnalyticsEvent.event_type.in_(ACTIVITY_EVENT_TYPES))
        )
        if event_type:
            query = query.filter(AnalyticsEvent.event_type == event_type)
        if invite:
            query = query.filter(Invitation.slug == invite)

        total = query.count()
        rows = (
            query.order_by(AnalyticsEvent.timestamp.desc(), AnalyticsEvent.id.desc())
            .offset(offset_for(page, limit))
            .limit(limit)
            .all()
        )
        activity = [_activity_row(event, invitation) for event, invitation in rows]
        return activity, build_pagination(page, limit, total)

    def get_top_invitations(
        self,
        page: int = 1,
        limit: int = 50,
        state: Optional[str] = None,
        confirmation_status: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """
        Active invitations ranked by view count, then newest first.

        state: 'viewed' (at least one view) or 'not_viewed'
        confirmation_status: 'confirmed' or 'pending'
        """
        if state not in (None, TOP_STATE_VIEWED, TOP_STATE_NOT_VIEWED):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="state must be 'viewed' or 'not_viewed'",
            )
        if confirmation_status not in (None, TOP_STATUS_CONFIRMED, TOP_STATUS_PENDING):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="status must be 'confirmed' or 'pending'",
            )

        view_count = func.count(AnalyticsEvent.id)
        query = (
            self.db.query(Invitation, view_count.label("view_count"))
            .outerjoin(
                AnalyticsEvent,
                and_(
                    AnalyticsEvent.invitation_id == Invitation.id,
                    AnalyticsEvent.event_type == EVENT_VIEW,
                ),
            )
            .filter(Invitation.is_active.is_(True))
        )
        if confirmation_status == TOP_STATUS_CONFIRMED:
            query = query.filter(Invitation.is_confirmed.is_(True))
        elif confirmation_status == TOP_STATUS_PENDING:
            query = query.filter(Invitation.is_confirmed.is_(False))

        query = query.group_by(Invitation.id)
        if state == TOP_STATE_VIEWED:
            query = query.having(view_count > 0)
        elif state == TOP_STATE_NOT_VIEWED:
            query = query.having(view_count == 0)

        total = query.order_by(None).count()
        rows = (
            query.order_by(view_count.desc(), Invitation.created_at.desc(), Invitation.id.desc())
            .offset(offset_for(page, limit))
            .limit(limit)
            .all()
        )
        invitations = [
            {
                "id": invitation.id,
                "slug": invitation.slug,
                "name": invitation.name,
                "lastname": invitation.lastname,
                "secondary_name": invitation.secondary_name,
                "secondary_lastname": invitation.secondary_lastname,
                "is_active": invitation.is_active,
                "is_confirmed": invitation.is_confirmed,
                "view_count": count,
                "created_at": invitation.created_at,
                "updated_at": invitation.updated_at,
            }
            for invitation, count in rows
        ]
        return invitations, build_pagination(page, limit, total)

    def get_filter_options(self) -> Dict[str, Any]:
        """Event types and invitations that actually appear in the activity feed."""
        event_types = [
            row.event_type
            for row in self.db.query(AnalyticsEvent.event_type)
            .filter(AnalyticsEvent.event_type.in_(ACTIVITY_EVENT_TYPES))
            .distinct()
            .order_by(AnalyticsEvent.event_type)
            .all()
        ]

        invitations = (
            self.db.query(Invitation)
            .filter(
                Invitation.id.in_(
                    self.db.query(AnalyticsEvent.invitation_id).filter(
                        AnalyticsEvent.event_type.in_(ACTIVITY_EVENT_TYPES),
                        AnalyticsEvent.invitation_id.isnot(None),
                    )
                )
            )
            .order_by(Invitation.name, Invitation.lastname)
            .all()
        )
        invites = [
            {
                "slug": invitation.slug,
                "name": full_name(invitation.name, invitation.lastname),
                "couple_name": (
                    full_name(invitation.secondary_name, invitation.secondary_lastname)
                    if invitation.secondary_name
                    else None
                ),
            }
            for invitation in invitations
        ]
        return {"event_types": event_types, "invites": invites}
