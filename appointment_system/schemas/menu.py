from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MenuCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    url: str = Field(min_length=1, max_length=255)
    display_order: int
    is_active: bool = True


class MenuUpdate(MenuCreate):
    id: Optional[int] = None


class MenuResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    url: str
    display_order: int
    is_active: bool
