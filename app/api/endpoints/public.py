from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.settings_service import SettingsService

router = APIRouter()


@router.get("/settings", response_model=dict, status_code=status.HTTP_200_OK)
def get_public_settings(db: Session = Depends(get_db)):
    """Publication flag and event date/time for the public pages"""
    try:
        return {
            "status": "success",
            "message": "Settings fetched successfully",
            "data": SettingsService(db).get_public(),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch settings: {str(e)}",
        )
