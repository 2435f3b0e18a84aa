import re
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def _normalize_slug(value: str) -> str:
    slug = value.strip().lower()
    if not SLUG_PATTERN.match(slug):
        raise ValueError("Slug may only contain lowercase letters, digits and single hyphens")
    return slug


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class InvitationCreate(BaseModel):
    slug: str = Field(..., min_length=1, max_length=100, description="URL-safe unique identifier")
    name: str = Field(..., min_length=1, max_length=100)
    lastname: str = Field(..., min_length=1, max_length=100)
    secondary_name: Optional[str] = Field(None, max_length=100)
    secondary_lastname: Optional[str] = Field(None, max_length=100)
    number_of_passes: int = Field(1, ge=1, le=50)
    is_confirmed: bool = False
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, value: str) -> str:
        return _normalize_slug(value)

    @field_validator("name", "lastname")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field cannot be blank")
        return value

    @field_validator("secondary_name", "secondary_lastname")
    @classmethod
    def strip_optional(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)


class InvitationUpdate(BaseModel):
    """Full replacement of the editable fields; name and slug are required."""
    slug: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    lastname: Optional[str] = Field(None, max_length=100)
    secondary_name: Optional[str] = Field(None, max_length=100)
    secondary_lastname: Optional[str] = Field(None, max_length=100)
    number_of_passes: int = Field(1, ge=1, le=50)
    is_confirmed: bool = False
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, value: str) -> str:
        return _normalize_slug(value)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field cannot be blank")
        return value

    @field_validator("lastname", "secondary_name", "secondary_lastname")
    @classmethod
    def strip_optional(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)


class InvitationResponse(BaseModel):
    id: int
    slug: str
    name: str
    lastname: Optional[str] = None
    secondary_name: Optional[str] = None
    secondary_lastname: Optional[str] = None
    number_of_passes: int
    is_confirmed: bool
    is_active: bool
    view_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ConfirmationRequest(BaseModel):
    slug: str = Field(..., min_length=1, description="Invitation slug")
    action: Literal["confirm", "unconfirm"]

    @field_validator("slug")
    @classmethod
    def strip_slug(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Slug is required")
        return value


class ConfirmationResponse(BaseModel):
    slug: str
    action: str
    is_confirmed: bool


class InvitationImportResult(BaseModel):
    total_rows: int
    success_count: int
    skipped_count: int
    error_count: int
    errors: Optional[list[str]] = None
