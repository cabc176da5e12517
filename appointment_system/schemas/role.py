from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import blank_to_none


class RoleCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    is_active: bool = True

    @field_validator("description", mode="before")
    @classmethod
    def blank_description(cls, value):
        return blank_to_none(value)


class RoleUpdate(RoleCreate):
    id: Optional[int] = None


class RoleResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_active: bool
    user_count: int = 0
