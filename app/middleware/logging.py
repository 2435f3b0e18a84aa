import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import get_logger

logger = get_logger("middleware.request")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status code, duration and acting admin of every request."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(
                f"{request.method} {request.url.path} failed after {duration_ms:.1f}ms",
                exc_info=True,
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        username = getattr(request.state, "user_username", None) or "-"
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({duration_ms:.1f}ms) user={username}"
        )
        return response
