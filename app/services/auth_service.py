from datetime import timezone
from typing import Any, Dict

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser
from app.core.logging import get_logger
from app.core.security import (
    create_access_token,
    generate_session_id,
    hash_password,
    session_lifetime,
    verify_password,
)
from app.models.admin_user import AdminUser
from app.models.session import Session as LoginSession
from app.schemas.auth import ChangePasswordRequest, LoginRequest
from app.schemas.user import UserResponse
from app.utils.dates import utcnow

logger = get_logger("services.auth")

MIN_PASSWORD_LENGTH = 8


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def login(self, credentials: LoginRequest) -> Dict[str, Any]:
        """
        Verify credentials and open a session.

        Unknown users, inactive users and wrong passwords all get the same
        401 so the response does not reveal which usernames exist.
        """
        user = self.db.query(AdminUser).filter(AdminUser.username == credentials.username.strip()).first()
        if not user or not user.is_active or not verify_password(credentials.password, user.password_hash):
            logger.warning(f"Failed login attempt for '{credentials.username}'")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid username or password",
            )

        try:
            now = utcnow()
            expires_at = now + session_lifetime(credentials.remember_me)
            session_id = generate_session_id()

            self.db.add(LoginSession(id=session_id, user_id=user.id, expires_at=expires_at, created_at=now))
            user.last_login = now
            self.db.commit()
            self.db.refresh(user)

            token = create_access_token(
                user_id=user.id,
                username=user.username,
                role=user.role,
                session_id=session_id,
                expires_at=expires_at.replace(tzinfo=timezone.utc),
                issued_at=now.replace(tzinfo=timezone.utc),
            )

            logger.info(f"User '{user.username}' logged in (remember_me={credentials.remember_me})")
            return {
                "token": token,
                "user": UserResponse.model_validate(user),
                "expires_at": expires_at,
            }

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating session for '{user.username}': {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to log in: {str(e)}",
            )

    def change_password(self, current_user: CurrentUser, password_data: ChangePasswordRequest) -> None:
        if password_data.new_password != password_data.confirm_password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="New password and confirm password do not match",
            )
        if len(password_data.new_password) < MIN_PASSWORD_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"New password must be at least {MIN_PASSWORD_LENGTH} characters long",
            )

        user = self.db.query(AdminUser).filter(AdminUser.id == current_user.user_id).first()
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        if not verify_password(password_data.current_password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect",
            )

        try:
            user.password_hash = hash_password(password_data.new_password)
            self.db.commit()
            logger.info(f"User '{user.username}' changed their password")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error changing password for '{user.username}': {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to change password: {str(e)}",
            )
