from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.logging import get_logger

logger = get_logger("exceptions")


def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error(f"HTTP Exception: {exc.status_code} - {exc.detail}")
    else:
        logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail}")

    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": "error",
            "error": message,
        },
        headers=getattr(exc, "headers", None),
    )


def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning(f"Validation Error: {errors}")

    message = "Validation error"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))

    return JSONResponse(
        status_code=400,
        content={
            "status": "error",
            "error": message,
            "errors": jsonable_encoder(exc.errors()),
        },
    )


def integrity_error_handler(request: Request, exc: IntegrityError):
    """Handle database integrity violations like unique constraint errors."""
    error_msg = str(getattr(exc, "orig", exc))
    logger.error(f"Integrity Error: {error_msg}")
    if "Duplicate entry" in error_msg or "UNIQUE" in error_msg or "unique" in error_msg:
        message = "Duplicate value violates a unique constraint."
    else:
        message = "Data integrity violation."
    return JSONResponse(
        status_code=409,
        content={
            "status": "error",
            "error": message,
        },
    )


def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    """Catch-all for other SQLAlchemy errors."""
    logger.error(f"SQLAlchemy Error: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "error": "Database error occurred.",
        },
    )


def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled Exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "error": "Internal server error",
        },
    )
