from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser
from app.core.logging import get_logger
from app.core.security import hash_password
from app.models.admin_user import PROTECTED_USERNAME, ROLE_ADMIN, AdminUser
from app.schemas.user import UserCreate, UserUpdate
from app.utils.pagination import build_pagination, offset_for

logger = get_logger("services.user")


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def _get_or_404(self, user_id: int) -> AdminUser:
        user = self.db.query(AdminUser).filter(AdminUser.id == user_id).first()
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User with ID {user_id} not found",
            )
        return user

    def _ensure_unique(self, username: str, email: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(AdminUser).filter(
            or_(
                func.lower(AdminUser.username) == username.lower(),
                func.lower(AdminUser.email) == email.lower(),
            )
        )
        if exclude_id is not None:
            query = query.filter(AdminUser.id != exclude_id)

        conflict = query.first()
        if conflict:
            field = "username" if conflict.username.lower() == username.lower() else "email"
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"A user with this {field} already exists",
            )

    def list_users(self, page: int = 1, limit: int = 20) -> Tuple[List[AdminUser], dict]:
        query = self.db.query(AdminUser)
        total = query.count()
        users = (
            query.order_by(AdminUser.created_at.desc(), AdminUser.id.desc())
            .offset(offset_for(page, limit))
            .limit(limit)
            .all()
        )
        return users, build_pagination(page, limit, total)

    def get_user(self, user_id: int) -> AdminUser:
        return self._get_or_404(user_id)

    def create_user(self, user_data: UserCreate) -> AdminUser:
        logger.info(f"Creating user '{user_data.username}' with role {user_data.role}")

        try:
            self._ensure_unique(user_data.username, user_data.email)

            user = AdminUser(
                username=user_data.username,
                email=user_data.email,
                password_hash=hash_password(user_data.password),
                role=user_data.role,
                is_active=user_data.is_active,
            )
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

            logger.info(f"User {user.id} created successfully")
            return user

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating user: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to create user: {str(e)}",
            )

    def update_user(self, user_id: int, user_data: UserUpdate) -> AdminUser:
        logger.info(f"Updating user {user_id}")

        try:
            user = self._get_or_404(user_id)
            self._ensure_unique(user_data.username, user_data.email, exclude_id=user_id)

            user.username = user_data.username
            user.email = user_data.email
            user.role = user_data.role
            user.is_active = user_data.is_active
            if user_data.password:
                user.password_hash = hash_password(user_data.password)

            self.db.commit()
            self.db.refresh(user)

            logger.info(f"User {user_id} updated successfully")
            return user

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating user {user_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to update user: {str(e)}",
            )

    def delete_user(self, user_id: int, current_user: CurrentUser) -> None:
        """
        Delete a user, refusing to:
        - delete the bootstrap `admin` account (any letter case)
        - delete the account making the request
        - remove the last active administrator
        """
        user = self._get_or_404(user_id)

        if user.username.lower() == PROTECTED_USERNAME:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="The main administrator account cannot be deleted",
            )
        if user.id == current_user.user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot delete your own account",
            )
        if user.role == ROLE_ADMIN and user.is_active:
            active_admins = (
                self.db.query(func.count(AdminUser.id))
                .filter(AdminUser.role == ROLE_ADMIN, AdminUser.is_active.is_(True))
                .scalar()
                or 0
            )
            if active_admins <= 1:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot delete the last active administrator",
                )

        try:
            self.db.delete(user)
            self.db.commit()
            logger.info(f"User {user_id} deleted by '{current_user.username}'")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting user {user_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to delete user: {str(e)}",
            )
