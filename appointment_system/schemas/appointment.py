from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ..models.appointment import AppointmentStatus
from .common import PHONE_PATTERN, blank_to_none


class AppointmentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    staff_id: int
    client_name: str = Field(min_length=1, max_length=200)
    client_email: Optional[EmailStr] = None
    client_phone: str = Field(max_length=20, pattern=PHONE_PATTERN)
    start_time: datetime
    duration_minutes: int = Field(ge=1, le=1440)
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("client_email", "notes", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)


class AppointmentUpdate(AppointmentCreate):
    id: Optional[int] = None


class AppointmentResponse(BaseModel):
    id: int
    staff_id: int
    staff_name: str = ""
    client_name: str
    client_email: Optional[str] = None
    client_phone: str
    start_time: datetime
    duration_minutes: int
    status: AppointmentStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
