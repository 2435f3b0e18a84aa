from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.api import api_router
from app.core.config import settings
from app.core.database import Base, engine
from app.core.logging import setup_logging, get_logger
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.auth_interceptor import AuthInterceptorMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app.core.exceptions import (
    http_exception_handler,
    request_validation_exception_handler,
    integrity_error_handler,
    sqlalchemy_error_handler,
    unhandled_exception_handler,
)

# Import all models so metadata and relationships are complete
import app.models  # noqa: F401

# Setup logging
setup_logging()
logger = get_logger("main")


@asynccontextmanager
async def lifespan(application: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured")
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started ({settings.ENVIRONMENT})")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Quinceañera invitation CMS: invitations, RSVP confirmation, analytics and admin users",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

# Add middleware (order matters - last added is outermost)
# Auth interceptor runs inside the request logger so the log line can name the admin
app.add_middleware(
    AuthInterceptorMiddleware,
    skip_paths=[
        # System endpoints
        "/health",
        "/docs",
        "/openapi.json",
        "/redoc",
        "/",  # exact match only - handled in should_skip_path

        # Public pages
        f"{settings.API_PREFIX}/invitations/confirm",
        f"{settings.API_PREFIX}/public",
        f"{settings.API_PREFIX}/client-info",
        f"{settings.API_PREFIX}/auth/login",
    ],
)
app.add_middleware(RequestLoggingMiddleware)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME} API"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# Exception handlers
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)
