"""
Helpers shared by the browser page routers.

Pages are answered with their view model as JSON; rendering is left to the
client. Form posts are validated against the same schemas as the JSON API
and redirect with 303 on success.
"""

from typing import Iterable, Type, TypeVar
from urllib.parse import urlsplit

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, ValidationError

from ..api.deps import RequestContext
from ..core.exceptions import ValidationFailed

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def view(context: RequestContext, title: str, **model) -> dict:
    """Page view model: the caller, their navigation and the page data."""
    return {
        "title": title,
        "user": context.identity,
        "menus": context.menus,
        **model,
    }


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def local_url(url: str, default: str = "/dashboard") -> str:
    """Only same-site paths are accepted as redirect targets."""
    if not url:
        return default
    parts = urlsplit(url)
    if parts.scheme or parts.netloc or not url.startswith("/") or url.startswith("//"):
        return default
    return url


def validate(schema: Type[SchemaT], data: dict) -> SchemaT:
    """Validate form data, reporting problems per field."""
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        errors = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "form"
            errors.setdefault(field, error["msg"])
        raise ValidationFailed(errors=errors)


async def read_form(
    request: Request,
    schema: Type[SchemaT],
    list_fields: Iterable[str] = (),
    checkbox_fields: Iterable[str] = ("is_active",),
) -> SchemaT:
    """Parse a posted form into a schema.

    Multi-select fields are read with every submitted value and an unchecked
    checkbox, which browsers leave out entirely, counts as false.
    """
    form = await request.form()
    data = {key: value for key, value in form.items()}
    for field in list_fields:
        data[field] = form.getlist(field)
    for field in checkbox_fields:
        data[field] = field in form and form.get(field) not in ("", "false", "off")
    return validate(schema, data)
