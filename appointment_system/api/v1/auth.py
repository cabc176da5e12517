from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ...core.database import get_db, get_redis
from ...core.exceptions import ValidationFailed
from ...core.security import (
    Identity, OAuthProvider, create_access_token, set_session_cookie, clear_session_cookie
)
from ...api.deps import (
    RequestContext, page_context, rate_limit_check
)
from ...services.auth_service import AuthService
from ...services import oauth_service
from ...services.user_service import UserService
from ...schemas.auth import LoginResponse, OAuthCallback, UserLogin, UserRegister
from ...schemas.common import MessageResponse
from ...schemas.user import UserResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _signed_in(response: Response, identity: Identity, message: str) -> LoginResponse:
    """Issue both the bearer token and the session cookie for an identity."""
    token, expires_at = create_access_token(identity)
    set_session_cookie(response, identity)
    return LoginResponse(
        user_id=identity.user_id,
        username=identity.username,
        full_name=identity.full_name,
        roles=identity.roles,
        message=message,
        token=token,
        token_type="bearer",
        expires_at=expires_at,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: UserLogin,
    response: Response,
    db: Session = Depends(get_db)
):
    """Authenticate and return a bearer token with the caller's claims."""
    identity = AuthService(db).authenticate(login_data.username, login_data.password)
    return _signed_in(response, identity, "Login successful")


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Register a new account; it stays pending until an administrator approves it."""
    user = AuthService(db).register(user_data)
    return UserService(db).get_user_response(user.id)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    # Bearer tokens stay valid until they expire; only the cookie is cleared
    clear_session_cookie(response)
    return {"message": "Successfully logged out"}


@router.get("/me")
async def me(context: RequestContext = Depends(page_context())):
    """Claims of the current caller together with their navigation."""
    return context


@router.get("/oauth/{provider}/login")
async def oauth_login(
    provider: str,
    redis_client = Depends(get_redis)
):
    """Start a third-party sign-in."""
    if provider != OAuthProvider.GOOGLE.value:
        raise ValidationFailed("Unsupported OAuth provider.")
    return {"auth_url": oauth_service.begin_google_login(redis_client)}


@router.post("/oauth/callback", response_model=LoginResponse)
async def oauth_callback(
    callback_data: OAuthCallback,
    response: Response,
    db: Session = Depends(get_db),
    redis_client = Depends(get_redis)
):
    """Finish a third-party sign-in and issue credentials for the linked account."""
    provider = oauth_service.consume_state(redis_client, callback_data.state)
    if provider != OAuthProvider.GOOGLE.value:
        raise ValidationFailed("Unsupported OAuth provider.")

    info = await oauth_service.fetch_google_user(callback_data.code)
    auth_service = AuthService(db)
    user = auth_service.link_external_identity(info)
    return _signed_in(response, auth_service.build_identity(user), "Login successful")
