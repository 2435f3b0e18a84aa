import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class SettingsUpdate(BaseModel):
    """All fields are written on update; omitted optional fields are cleared"""
    event_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    event_time: Optional[str] = Field(None, description="HH:MM, 24h")
    rsvp_enabled: bool = True
    rsvp_deadline: Optional[str] = Field(None, description="YYYY-MM-DD")
    rsvp_phone: Optional[str] = Field(None, max_length=30)
    rsvp_whatsapp: Optional[str] = Field(None, max_length=30)
    is_published: bool = False
    thank_you_page_enabled: bool = False

    @field_validator("event_date", "rsvp_deadline", mode="before")
    @classmethod
    def validate_date(cls, value):
        if value in (None, ""):
            return None
        if not isinstance(value, str) or not DATE_PATTERN.match(value):
            raise ValueError("Dates must use the YYYY-MM-DD format")
        datetime.strptime(value, "%Y-%m-%d")
        return value

    @field_validator("event_time", mode="before")
    @classmethod
    def validate_time(cls, value):
        if value in (None, ""):
            return None
        if not isinstance(value, str) or not TIME_PATTERN.match(value):
            raise ValueError("Times must use the HH:MM format")
        return value

    @field_validator("rsvp_phone", "rsvp_whatsapp", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class SettingsResponse(BaseModel):
    id: int
    event_date: Optional[str] = None
    event_time: Optional[str] = None
    rsvp_enabled: bool
    rsvp_deadline: Optional[str] = None
    rsvp_phone: Optional[str] = None
    rsvp_whatsapp: Optional[str] = None
    is_published: bool
    thank_you_page_enabled: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PublicSettings(BaseModel):
    is_published: bool = False
    event_date: Optional[str] = None
    event_time: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
