from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
import os


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Appointment System"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    TESTING: bool = os.getenv("TESTING", "0").lower() in ("1", "true", "t", "yes", "y")
    LOG_LEVEL: str = "INFO"

    # Database - a single SQLite file unless overridden
    DATABASE_URL: str = "sqlite:///./appointments.db"
    TEST_DATABASE_URL: str = "sqlite:///./test.db"

    # Bearer tokens (API clients)
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_ISSUER: str = "appointment-system"
    JWT_AUDIENCE: str = "appointment-system-api"

    # Session cookie (browser clients)
    SESSION_COOKIE_NAME: str = "appointment_session"
    SESSION_EXPIRE_MINUTES: int = 30
    SESSION_COOKIE_SECURE: bool = False

    # Redirect targets and the path convention that marks machine clients
    LOGIN_PATH: str = "/account/login"
    ACCESS_DENIED_PATH: str = "/account/access-denied"
    API_PREFIX: str = "/api/"

    # Assignments given to self-registered and provisioned accounts
    DEFAULT_ROLE_NAME: str = "Staff"
    DEFAULT_MENU_NAME: str = "Appointments"

    # Seed data
    SEED_ON_STARTUP: bool = True
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin123"
    STAFF_USERNAME: str = "staff"
    STAFF_PASSWORD: str = "staff123"

    # OAuth 2.0 Settings
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    OAUTH_REDIRECT_URI: str = "http://localhost:8000/account/google-callback"

    # Redis (rate limiting and OAuth state)
    REDIS_URL: str = "redis://localhost:6379"
    RATE_LIMIT_PER_HOUR: int = 10

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080", "http://testserver"]

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    @property
    def get_database_url(self):
        """Return the appropriate database URL based on if we're testing"""
        if self.TESTING:
            return self.TEST_DATABASE_URL
        return self.DATABASE_URL

    @property
    def session_max_age(self) -> int:
        return self.SESSION_EXPIRE_MINUTES * 60


# Create settings instance
settings = Settings()
