import re
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _validate_username(value: str) -> str:
    value = value.strip()
    if not 3 <= len(value) <= 20:
        raise ValueError("Username must be between 3 and 20 characters")
    if not USERNAME_PATTERN.match(value):
        raise ValueError("Username may only contain letters, digits, '.', '_' and '-'")
    return value


class UserCreate(BaseModel):
    """Schema for creating an admin panel user"""
    username: str = Field(..., description="Login name, 3-20 characters")
    email: EmailStr
    password: str = Field(..., min_length=8, description="Plain password, hashed before storage")
    role: Literal["admin", "editor"] = "editor"
    is_active: bool = True

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        return _validate_username(value)


class UserUpdate(BaseModel):
    """Schema for updating a user; the password is only changed when provided"""
    username: str
    email: EmailStr
    password: Optional[str] = Field(None, min_length=8)
    role: Literal["admin", "editor"]
    is_active: bool = True

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        return _validate_username(value)

    @field_validator("password", mode="before")
    @classmethod
    def empty_password_means_unchanged(cls, value):
        if isinstance(value, str) and value == "":
            return None
        return value


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str
    is_active: bool
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
