from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, get_current_user
from app.core.database import get_db
from app.schemas.auth import ChangePasswordRequest, LoginRequest, LoginResponse
from app.services.auth_service import AuthService

router = APIRouter()


@router.post("/login", response_model=dict, status_code=status.HTTP_200_OK)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Exchange username and password for a bearer token"""
    try:
        service = AuthService(db)
        result = service.login(credentials)
        return {
            "status": "success",
            "message": "Login successful",
            "data": LoginResponse(**result),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to log in: {str(e)}",
        )


@router.get("/validate", response_model=dict, status_code=status.HTTP_200_OK)
def validate_token(current_user: CurrentUser = Depends(get_current_user)):
    """Check the bearer token and return the session it belongs to"""
    return {
        "status": "success",
        "message": "Token is valid",
        "data": {
            "id": current_user.user_id,
            "username": current_user.username,
            "email": current_user.email,
            "role": current_user.role,
            "session_id": current_user.session_id,
        },
    }


@router.post("/change-password", response_model=dict, status_code=status.HTTP_200_OK)
def change_password(
    password_data: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        AuthService(db).change_password(current_user, password_data)
        return {"status": "success", "message": "Password changed successfully"}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to change password: {str(e)}",
        )
