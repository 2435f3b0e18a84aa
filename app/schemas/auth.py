from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.user import UserResponse


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    remember_me: bool = Field(False, alias="rememberMe")

    model_config = {"populate_by_name": True}


class LoginResponse(BaseModel):
    token: str
    user: UserResponse
    expires_at: datetime


class ChangePasswordRequest(BaseModel):
    """Frontend sends camelCase; snake_case is accepted too"""
    current_password: str = Field(..., min_length=1, alias="currentPassword")
    new_password: str = Field(..., min_length=1, alias="newPassword")
    confirm_password: str = Field(..., min_length=1, alias="confirmPassword")

    model_config = {"populate_by_name": True}
