from urllib.parse import urlencode

import httpx

from ..core.config import settings
from ..core.exceptions import ValidationFailed
from ..core.security import OAuthProvider, generate_oauth_state
from ..schemas.auth import OAuthUserInfo

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

STATE_TTL_SECONDS = 600


def _state_key(state: str) -> str:
    return f"oauth_state:{state}"


def begin_google_login(redis_client) -> str:
    """Store a fresh state value and return the Google consent URL."""
    if not settings.GOOGLE_CLIENT_ID:
        raise ValidationFailed("Google sign-in is not configured.")

    state = generate_oauth_state()
    redis_client.setex(_state_key(state), STATE_TTL_SECONDS, OAuthProvider.GOOGLE.value)

    params = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "redirect_uri": settings.OAUTH_REDIRECT_URI,
        "scope": "openid email profile",
        "response_type": "code",
        "state": state,
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def consume_state(redis_client, state: str) -> str:
    """Validate and discard a state value; returns the provider it was issued for."""
    provider = redis_client.get(_state_key(state)) if state else None
    if not provider:
        raise ValidationFailed("Invalid or expired state parameter.")
    redis_client.delete(_state_key(state))
    return provider


async def fetch_google_user(code: str) -> OAuthUserInfo:
    """Exchange an authorization code for the signed-in Google account."""
    token_data = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "client_secret": settings.GOOGLE_CLIENT_SECRET,
        "code": code,
        "grant_type": "authorization_code",
        "redirect_uri": settings.OAUTH_REDIRECT_URI,
    }

    async with httpx.AsyncClient() as client:
        token_response = await client.post(GOOGLE_TOKEN_URL, data=token_data)
        if token_response.status_code != 200:
            raise ValidationFailed("Failed to exchange code for token.")

        access_token = token_response.json().get("access_token")
        user_response = await client.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if user_response.status_code != 200:
            raise ValidationFailed("Failed to get user information.")

        user_info = user_response.json()

    if not user_info.get("email"):
        raise ValidationFailed("The Google account did not share an email address.")

    return OAuthUserInfo(
        email=user_info["email"],
        name=user_info.get("name"),
        provider=OAuthProvider.GOOGLE.value,
    )
