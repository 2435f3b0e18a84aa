from fastapi import APIRouter
from app.api.endpoints import (
    analytics,
    auth,
    client_info,
    invitations,
    messages,
    public,
    settings,
    statistics,
    users,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/auth/users", tags=["users"])
api_router.include_router(invitations.router, prefix="/invitations", tags=["invitations"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(messages.router, prefix="/analytics", tags=["messages"])
api_router.include_router(statistics.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(public.router, prefix="/public", tags=["public"])
api_router.include_router(client_info.router, tags=["client-info"])
