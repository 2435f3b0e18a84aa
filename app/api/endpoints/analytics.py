from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, get_current_user
from app.core.database import get_db
from app.schemas.analytics import AnalyticsEventCreate, AnalyticsEventResponse
from app.services.analytics_service import AnalyticsService
from app.utils.request_info import get_client_ip, get_user_agent

router = APIRouter()


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def track_event(
    event_data: AnalyticsEventCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    """Public tracking endpoint used by the invitation pages"""
    try:
        event = AnalyticsService(db).track_event(
            event_data,
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request, event_data.user_agent),
            referrer=event_data.referrer or request.headers.get("referer"),
        )
        return {
            "status": "success",
            "message": "Event recorded",
            "data": AnalyticsEventResponse.model_validate(event),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to track analytics event: {str(e)}",
        )


@router.get("/dashboard", response_model=dict, status_code=status.HTTP_200_OK)
def get_dashboard(
    tz: Optional[str] = Query(None, description="IANA time zone used for per-day buckets"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        data = AnalyticsService(db).get_dashboard(tz_name=tz)
        return {
            "status": "success",
            "message": "Analytics fetched successfully",
            "data": data,
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch analytics: {str(e)}",
        )


@router.get("/recent-activity", response_model=dict, status_code=status.HTTP_200_OK)
def get_recent_activity(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    event_type: Optional[str] = Query(None, description="Exact event type filter"),
    invite: Optional[str] = Query(None, description="Invitation slug filter"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        activity, pagination = AnalyticsService(db).get_recent_activity(
            page=page, limit=limit, event_type=event_type, invite=invite
        )
        return {
            "status": "success",
            "message": "Recent activity fetched successfully",
            "data": activity,
            "pagination": pagination,
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch recent activity: {str(e)}",
        )


@router.get("/top-invitations", response_model=dict, status_code=status.HTTP_200_OK)
def get_top_invitations(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    state: Optional[str] = Query(None, description="viewed | not_viewed"),
    confirmation_status: Optional[str] = Query(None, alias="status", description="confirmed | pending"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        invitations, pagination = AnalyticsService(db).get_top_invitations(
            page=page, limit=limit, state=state, confirmation_status=confirmation_status
        )
        return {
            "status": "success",
            "message": "Top invitations fetched successfully",
            "data": invitations,
            "pagination": pagination,
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch top invitations: {str(e)}",
        )


@router.get("/filter-options", response_model=dict, status_code=status.HTTP_200_OK)
def get_filter_options(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return {
            "status": "success",
            "message": "Filter options fetched successfully",
            "data": AnalyticsService(db).get_filter_options(),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch filter options: {str(e)}",
        )
