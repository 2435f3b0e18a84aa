from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, require_admin
from app.core.database import get_db
from app.schemas.user import UserCreate, UserResponse, UserUpdate
from app.services.user_service import UserService

router = APIRouter()


@router.get("", response_model=dict, status_code=status.HTTP_200_OK)
def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List admin panel users, newest first"""
    try:
        users, pagination = UserService(db).list_users(page=page, limit=limit)
        return {
            "status": "success",
            "message": "Users fetched successfully",
            "data": [UserResponse.model_validate(user) for user in users],
            "pagination": pagination,
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch users: {str(e)}",
        )


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    current_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        user = UserService(db).create_user(user_data)
        return {
            "status": "success",
            "message": "User created successfully",
            "data": UserResponse.model_validate(user),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create user: {str(e)}",
        )


@router.get("/{user_id}", response_model=dict, status_code=status.HTTP_200_OK)
def get_user(
    user_id: int,
    current_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        user = UserService(db).get_user(user_id)
        return {
            "status": "success",
            "message": "User fetched successfully",
            "data": UserResponse.model_validate(user),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch user: {str(e)}",
        )


@router.put("/{user_id}", response_model=dict, status_code=status.HTTP_200_OK)
def update_user(
    user_id: int,
    user_data: UserUpdate,
    current_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        user = UserService(db).update_user(user_id, user_data)
        return {
            "status": "success",
            "message": "User updated successfully",
            "data": UserResponse.model_validate(user),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update user: {str(e)}",
        )


@router.delete("/{user_id}", response_model=dict, status_code=status.HTTP_200_OK)
def delete_user(
    user_id: int,
    current_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Delete a user. The `admin` account, yourself and the last active admin are protected."""
    try:
        UserService(db).delete_user(user_id, current_user)
        return {"status": "success", "message": "User deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete user: {str(e)}",
        )
