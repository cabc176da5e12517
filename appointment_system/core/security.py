from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple
from jose import JWTError, jwt
from passlib.context import CryptContext
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from fastapi import HTTPException, Response, status
from fastapi.security import HTTPBearer
from pydantic import BaseModel
import secrets
from enum import Enum

from .config import settings

# Password hashing: salted and iterated
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Bearer header is optional because browsers authenticate with the cookie
security = HTTPBearer(auto_error=False)

SESSION_SALT = "session-cookie"


class UserRole(str, Enum):
    """Role names created by the seed routine."""
    ADMIN = "Admin"
    STAFF = "Staff"


class Identity(BaseModel):
    """Claims established at login and shared by both session transports."""
    user_id: int
    username: str
    full_name: str
    roles: List[str] = []

    def has_role(self, role: str) -> bool:
        return role in self.roles


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    roles: List[str] = []
    iss: Optional[str] = None
    aud: Optional[str] = None
    iat: Optional[int] = None
    exp: Optional[int] = None

    def to_identity(self) -> Optional[Identity]:
        if not self.sub or not self.sub.isdigit() or not self.username:
            return None
        return Identity(
            user_id=int(self.sub),
            username=self.username,
            full_name=self.full_name or "",
            roles=self.roles,
        )


# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)


def generate_unusable_password() -> str:
    """Random password for provisioned accounts that sign in elsewhere."""
    return secrets.token_urlsafe(32)


# JWT utilities
def create_access_token(
    identity: Identity,
    expires_delta: Optional[timedelta] = None
) -> Tuple[str, datetime]:
    """Create a signed bearer token carrying the identity claims."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "sub": str(identity.user_id),
        "username": identity.username,
        "full_name": identity.full_name,
        "roles": list(identity.roles),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": expire,
    }

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt, expire


def verify_token(token: str) -> Optional[TokenPayload]:
    """Verify and decode JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )

        return TokenPayload(**payload)

    except JWTError:
        return None


# Session cookie utilities
def _session_serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.SECRET_KEY, salt=SESSION_SALT)


def create_session_value(identity: Identity) -> str:
    return _session_serializer().dumps(identity.model_dump())


def read_session_cookie(value: str) -> Optional[Tuple[Identity, datetime]]:
    """Decode a session cookie, returning the identity and when it was signed."""
    try:
        payload, signed_at = _session_serializer().loads(
            value,
            max_age=settings.session_max_age,
            return_timestamp=True,
        )
        return Identity(**payload), signed_at
    except (BadSignature, SignatureExpired, TypeError, ValueError):
        return None


def set_session_cookie(response: Response, identity: Identity) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=create_session_value(identity),
        max_age=settings.session_max_age,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")


def is_api_request(path: str) -> bool:
    """Machine clients are recognised by the API path prefix."""
    return path.startswith(settings.API_PREFIX)


# Security exceptions
class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


# OAuth 2.0 utilities
class OAuthProvider(str, Enum):
    GOOGLE = "google"


def generate_oauth_state() -> str:
    """Generate state parameter for OAuth 2.0 flow."""
    return secrets.token_urlsafe(32)
