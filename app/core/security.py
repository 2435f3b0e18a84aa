import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a stored hash; unknown hash formats never match."""
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def generate_session_id() -> str:
    return str(uuid.uuid4())


def session_lifetime(remember_me: bool) -> timedelta:
    """24 hours by default, a week when the admin asked to be remembered."""
    if remember_me:
        return timedelta(days=settings.REMEMBER_ME_DAYS)
    return timedelta(hours=settings.SESSION_HOURS)


def create_access_token(
    user_id: int,
    username: str,
    role: str,
    session_id: str,
    expires_at: datetime,
    issued_at: Optional[datetime] = None,
) -> str:
    """Create the signed JWT handed to the admin UI at login."""
    issued_at = issued_at or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "sid": session_id,
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises jwt.InvalidTokenError (or a subclass such as ExpiredSignatureError)
    when the token cannot be trusted.
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )
