from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .common import blank_to_none, strip_text


class UserLogin(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    # Passwords are kept exactly as typed
    password: str = Field(min_length=1)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value):
        return strip_text(value)


class UserRegister(BaseModel):
    full_name: str = Field(min_length=1, max_length=100)
    username: str = Field(min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    password: str = Field(min_length=6, max_length=100)
    confirm_password: str

    @field_validator("full_name", "username", mode="before")
    @classmethod
    def strip_names(cls, value):
        return strip_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email(cls, value):
        return blank_to_none(strip_text(value))

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info):
        if value != info.data.get("password"):
            raise ValueError("Passwords do not match")
        return value


class LoginResponse(BaseModel):
    user_id: int
    username: str
    full_name: str
    roles: List[str] = []
    message: str
    token: Optional[str] = None
    token_type: Optional[str] = None
    expires_at: Optional[datetime] = None


class OAuthCallback(BaseModel):
    code: str
    state: str


class OAuthUserInfo(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    provider: str = "google"
