from typing import Any

from pydantic import BaseModel

PHONE_PATTERN = r"^\+?[0-9 ().\-]{3,20}$"


def blank_to_none(value: Any) -> Any:
    """Treat empty form fields as missing optional values."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def strip_text(value: Any) -> Any:
    """Trim names and usernames; passwords are never passed through here."""
    if isinstance(value, str):
        return value.strip()
    return value


class MessageResponse(BaseModel):
    message: str
