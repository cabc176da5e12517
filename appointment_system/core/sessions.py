from datetime import datetime, timezone

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from .config import settings
from .security import read_session_cookie, set_session_cookie


class SlidingSessionMiddleware(BaseHTTPMiddleware):
    """Re-issue the session cookie once more than half its lifetime has passed."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
        if not cookie or self._sets_session_cookie(response):
            return response

        session = read_session_cookie(cookie)
        if session:
            identity, signed_at = session
            age = (datetime.now(timezone.utc) - signed_at).total_seconds()
            if age > settings.session_max_age / 2:
                set_session_cookie(response, identity)

        return response

    @staticmethod
    def _sets_session_cookie(response) -> bool:
        # The handler already issued or cleared the cookie
        prefix = f"{settings.SESSION_COOKIE_NAME}="
        return any(value.startswith(prefix) for value in response.headers.getlist("set-cookie"))
