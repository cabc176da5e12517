from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .common import PHONE_PATTERN, blank_to_none


class StaffCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(default=None, max_length=20, pattern=PHONE_PATTERN)
    specialty: Optional[str] = Field(default=None, max_length=100)
    is_active: bool = True

    @field_validator("email", "phone_number", "specialty", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)


class StaffUpdate(StaffCreate):
    id: Optional[int] = None


class StaffResponse(BaseModel):
    id: int
    full_name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    specialty: Optional[str] = None
    is_active: bool
    appointment_count: int = 0
