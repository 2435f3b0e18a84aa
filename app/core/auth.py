"""
Authentication and Authorization Dependencies

FastAPI dependencies that turn the `Authorization: Bearer <token>` header into
a `CurrentUser` session object.

Every privileged request:
- extracts the bearer token (missing or malformed header -> 401)
- verifies the JWT signature and expiry (failure -> 401)
- looks the subject up in `admin_users`, rejecting accounts that were
  deactivated or deleted after the token was issued (-> 401)
- refreshes `last_login` for the account

Admin-only routes additionally depend on `require_admin` (-> 403 for editors).
"""
from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.logging import get_logger
from app.core.security import decode_access_token
from app.models.admin_user import ROLE_ADMIN, AdminUser
from app.utils.dates import utcnow

logger = get_logger("core.auth")


class CurrentUser(BaseModel):
    """Authenticated admin session passed to endpoints through dependency injection"""
    user_id: int
    username: str
    email: Optional[str] = None
    role: str
    session_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an `Authorization: Bearer <token>` header value.

    Returns None when the header is absent or does not use the Bearer scheme.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    FastAPI dependency resolving the current admin from the bearer JWT.

    Usage:
        @router.get("/invitations")
        def list_invitations(
            current_user: CurrentUser = Depends(get_current_user),
            db: Session = Depends(get_db),
        ):
            ...
    """
    token = extract_bearer_token(authorization)
    if not token:
        raise _unauthorized("Authentication required")

    try:
        claims = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected invalid token: {str(e)}")
        raise _unauthorized("Invalid token")

    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Invalid token subject")

    user = db.query(AdminUser).filter(AdminUser.id == user_id).first()
    if not user or not user.is_active:
        logger.warning(f"Token subject {user_id} is missing or inactive")
        raise _unauthorized("User is inactive or no longer exists")

    user.last_login = utcnow()
    db.commit()

    return CurrentUser(
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        session_id=claims.get("sid"),
    )


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency for routes restricted to the `admin` role."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator permissions are required",
        )
    return current_user
