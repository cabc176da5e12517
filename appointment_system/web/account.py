import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form
from sqlalchemy.orm import Session

from ..api.deps import RequestContext, public_page_context, rate_limit_check
from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.exceptions import PendingApproval
from ..core.security import clear_session_cookie, set_session_cookie
from ..schemas.auth import UserRegister
from ..services import oauth_service
from ..services.auth_service import AuthService
from .common import local_url, redirect, validate, view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/account", tags=["Account pages"])

PENDING_PATH = "/account/registration-pending"


@router.get("/login")
async def login_page(
    return_url: Optional[str] = None,
    context: RequestContext = Depends(public_page_context)
):
    return view(
        context,
        "Log in",
        return_url=local_url(return_url),
        google_enabled=bool(settings.GOOGLE_CLIENT_ID),
    )


@router.post("/login")
async def login(
    username: str = Form(...),
    password: str = Form(...),
    return_url: Optional[str] = Form(None),
    db: Session = Depends(get_db)
):
    """Sign in with the login form and continue to the requested page."""
    identity = AuthService(db).authenticate(username.strip(), password)
    response = redirect(local_url(return_url))
    set_session_cookie(response, identity)
    return response


@router.get("/register")
async def register_page(context: RequestContext = Depends(public_page_context)):
    return view(context, "Register")


@router.post("/register")
async def register(
    full_name: str = Form(...),
    username: str = Form(...),
    email: Optional[str] = Form(None),
    password: str = Form(...),
    confirm_password: str = Form(...),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    data = validate(UserRegister, {
        "full_name": full_name,
        "username": username,
        "email": email,
        "password": password,
        "confirm_password": confirm_password,
    })
    AuthService(db).register(data)
    return redirect(PENDING_PATH)


@router.get("/registration-pending")
async def registration_pending(context: RequestContext = Depends(public_page_context)):
    return view(
        context,
        "Registration received",
        message="Your account is pending admin approval.",
    )


@router.post("/logout")
async def logout():
    response = redirect(settings.LOGIN_PATH)
    clear_session_cookie(response)
    return response


@router.get("/access-denied")
async def access_denied(context: RequestContext = Depends(public_page_context)):
    return view(
        context,
        "Access denied",
        message="You do not have permission to view this page.",
    )


@router.get("/google-login")
async def google_login(redis_client = Depends(get_redis)):
    return redirect(oauth_service.begin_google_login(redis_client))


@router.get("/google-callback")
async def google_callback(
    code: str,
    state: str,
    db: Session = Depends(get_db),
    redis_client = Depends(get_redis)
):
    """Finish Google sign-in; unapproved accounts land on the pending page."""
    oauth_service.consume_state(redis_client, state)
    info = await oauth_service.fetch_google_user(code)

    auth_service = AuthService(db)
    try:
        user = auth_service.link_external_identity(info)
    except PendingApproval:
        logger.info(f"Google sign-in for {info.email} is awaiting approval")
        return redirect(PENDING_PATH)

    response = redirect("/dashboard")
    set_session_cookie(response, auth_service.build_identity(user))
    return response
