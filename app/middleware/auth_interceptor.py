"""
Authentication Interceptor Middleware

Reads the bearer token (when present) before the request reaches a router and
stores the claimed identity on `request.state`, so request logs and response
headers can name the acting admin.

This middleware never rejects a request: enforcement (signature, expiry,
account still active, role) is done by the `get_current_user` and
`require_admin` dependencies in `app.core.auth`.

Usage:
    from app.middleware.auth_interceptor import AuthInterceptorMiddleware

    app.add_middleware(
        AuthInterceptorMiddleware,
        skip_paths=["/health", "/docs", "/openapi.json"],
    )
"""
from typing import List, Optional

import jwt
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.auth import extract_bearer_token
from app.core.logging import get_logger
from app.core.security import decode_access_token

logger = get_logger("middleware.auth-interceptor")


class AuthInterceptorMiddleware(BaseHTTPMiddleware):
    """
    Attach token identity (user_id, username, role) to request.state and echo
    X-User-Id on the response.

    Args:
        skip_paths: paths that never carry admin tokens (health, docs, public APIs)
    """

    def __init__(self, app, skip_paths: Optional[List[str]] = None):
        super().__init__(app)
        self.skip_paths = skip_paths or ["/health", "/docs", "/openapi.json", "/redoc", "/"]

    def should_skip_path(self, path: str) -> bool:
        """Check if the path should skip token inspection."""
        if path in self.skip_paths:
            return True

        for skip_path in self.skip_paths:
            # Root path "/" only matches exactly
            if skip_path == "/":
                continue
            if path.startswith(skip_path):
                return True

        return False

    def get_user_info_from_token(self, token: str) -> Optional[dict]:
        try:
            claims = decode_access_token(token)
        except jwt.InvalidTokenError as e:
            logger.debug(f"Ignoring unusable token: {str(e)}")
            return None

        return {
            "user_id": claims.get("sub"),
            "username": claims.get("username"),
            "role": claims.get("role"),
        }

    async def dispatch(self, request: Request, call_next):
        request.state.user_id = None
        request.state.user_username = None
        request.state.user_role = None

        if self.should_skip_path(request.url.path):
            return await call_next(request)

        token = extract_bearer_token(request.headers.get("Authorization"))
        user_info = self.get_user_info_from_token(token) if token else None

        if user_info:
            request.state.user_id = user_info["user_id"]
            request.state.user_username = user_info["username"]
            request.state.user_role = user_info["role"]

        response = await call_next(request)

        if user_info and user_info.get("user_id"):
            response.headers["X-User-Id"] = str(user_info["user_id"])

        return response
