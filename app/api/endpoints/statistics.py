from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, get_current_user
from app.core.database import get_db
from app.services.statistics_service import StatisticsService

router = APIRouter()


@router.get("/stats", response_model=dict, status_code=status.HTTP_200_OK)
def get_dashboard_statistics(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Get dashboard statistics:
    - totals: active invitations, confirmed, invitations viewed, pending
    - recent: activity of the last 7 days
    - top_invitations: five most viewed active invitations
    """
    try:
        statistics = StatisticsService(db).get_dashboard_statistics()
        return {
            "status": "success",
            "message": "Dashboard statistics fetched successfully",
            "data": statistics,
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch dashboard statistics: {str(e)}",
        )
