import logging
from typing import List, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.exceptions import ValidationFailed
from ..core.security import (
    security, verify_token, read_session_cookie, AuthenticationError,
    AuthorizationError, Identity
)
from ..schemas.menu import MenuResponse
from ..services.menu_service import MenuService

logger = logging.getLogger(__name__)


class RequestContext(BaseModel):
    """Who is calling and which navigation entries they may see."""
    identity: Optional[Identity] = None
    menus: List[MenuResponse] = []


async def get_current_identity_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[Identity]:
    """Identity from the bearer header, else from the session cookie."""
    if credentials:
        token_payload = verify_token(credentials.credentials)
        identity = token_payload.to_identity() if token_payload else None
        if identity:
            return identity

    cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if cookie:
        session = read_session_cookie(cookie)
        if session:
            return session[0]

    return None


async def get_current_identity(
    identity: Optional[Identity] = Depends(get_current_identity_optional)
) -> Identity:
    """Require an authenticated caller."""
    if identity is None:
        raise AuthenticationError()
    return identity


def require_role(role: str):
    """Create a dependency that requires the caller to hold a role."""
    async def role_checker(
        request: Request,
        identity: Identity = Depends(get_current_identity)
    ) -> Identity:
        if not identity.has_role(role):
            logger.warning(
                f"Access denied: user {identity.user_id} with roles {identity.roles} "
                f"requires '{role}' for {request.method} {request.url.path}"
            )
            raise AuthorizationError()
        return identity

    return role_checker


def _resolve_menus(db: Session, identity: Identity) -> List[MenuResponse]:
    menus = MenuService(db).resolve_for_user(identity.user_id)
    return [MenuResponse.model_validate(menu) for menu in menus]


def page_context(required_role: Optional[str] = None):
    """Build the per-request context for a protected page.

    Authentication runs first, then the role check, then the navigation
    lookup, so a denied caller never triggers the menu query.
    """
    gate = require_role(required_role) if required_role else get_current_identity

    async def build_context(
        identity: Identity = Depends(gate),
        db: Session = Depends(get_db)
    ) -> RequestContext:
        return RequestContext(identity=identity, menus=_resolve_menus(db, identity))

    return build_context


async def public_page_context(
    identity: Optional[Identity] = Depends(get_current_identity_optional),
    db: Session = Depends(get_db)
) -> RequestContext:
    """Context for pages that anonymous callers may also open."""
    if identity is None:
        return RequestContext()
    return RequestContext(identity=identity, menus=_resolve_menus(db, identity))


def ensure_matching_id(path_id: int, body_id: Optional[int]) -> None:
    """An update body may repeat its id, but it must be the one in the URL."""
    if body_id is not None and body_id != path_id:
        raise ValidationFailed(
            "The id in the request body does not match the URL.",
            errors={"id": "Does not match the URL."},
        )


# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Fixed one-hour window per client address."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, 3600, 1)
    else:
        if int(current_requests) >= settings.RATE_LIMIT_PER_HOUR:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
