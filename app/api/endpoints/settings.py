from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, get_current_user
from app.core.database import get_db
from app.schemas.settings import SettingsResponse, SettingsUpdate
from app.services.settings_service import SettingsService

router = APIRouter()


@router.get("", response_model=dict, status_code=status.HTTP_200_OK)
def get_settings(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current event settings; defaults are created on first access"""
    try:
        current = SettingsService(db).get_or_create()
        return {
            "status": "success",
            "message": "Settings fetched successfully",
            "data": SettingsResponse.model_validate(current),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch settings: {str(e)}",
        )


@router.put("", response_model=dict, status_code=status.HTTP_200_OK)
def update_settings(
    settings_data: SettingsUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        current = SettingsService(db).update(settings_data)
        return {
            "status": "success",
            "message": "Settings updated successfully",
            "data": SettingsResponse.model_validate(current),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update settings: {str(e)}",
        )
