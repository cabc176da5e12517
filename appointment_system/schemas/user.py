from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .common import blank_to_none, strip_text


class UserBase(BaseModel):
    full_name: str = Field(min_length=1, max_length=100)
    username: str = Field(min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    is_active: bool = True
    role_ids: List[int] = []
    menu_ids: List[int] = []

    @field_validator("full_name", "username", mode="before")
    @classmethod
    def strip_names(cls, value):
        return strip_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email(cls, value):
        return blank_to_none(strip_text(value))


class UserCreate(UserBase):
    password: str = Field(min_length=6, max_length=100)


class UserUpdate(UserBase):
    id: Optional[int] = None
    # Left empty to keep the current password
    password: Optional[str] = Field(default=None, min_length=6, max_length=100)

    @field_validator("password", mode="before")
    @classmethod
    def blank_password(cls, value):
        return blank_to_none(value)


class UserResponse(BaseModel):
    id: int
    full_name: str
    username: str
    email: Optional[str] = None
    is_active: bool
    is_approved: bool
    created_at: Optional[datetime] = None
    roles: List[str] = []
    menus: List[str] = []


class AssignmentOption(BaseModel):
    """One checkbox on the user edit form."""
    id: int
    name: str
    selected: bool = False
