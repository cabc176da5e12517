from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from urllib.parse import urlencode
import time
import logging

from .api.v1.appointments import router as appointments_router
from .api.v1.auth import router as auth_router
from .api.v1.dashboard import router as dashboard_router
from .api.v1.menus import router as menus_router
from .api.v1.roles import router as roles_router
from .api.v1.staff import router as staff_router
from .api.v1.users import router as users_router
from .core.config import settings
from .core.database import SessionLocal, init_db
from .core.exceptions import AppError
from .core.security import AuthenticationError, AuthorizationError, is_api_request
from .core.sessions import SlidingSessionMiddleware
from .services.seed_service import seed
from .web import account, appointments, dashboard, menus, roles, staff, users

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Staff appointment scheduling with role and menu based access",
    openapi_url="/api/v1/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Middleware setup
app.add_middleware(SlidingSessionMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Only add TrustedHostMiddleware in production, not in testing
if not settings.TESTING:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1", "*.localhost", "testserver"]
    )


# Custom middleware for request logging and timing
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Log request
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.4f}s"
    )

    return response


def _error_body(error: str, message: str, errors: dict = None) -> dict:
    body = {"error": error, "message": message}
    if errors:
        body["errors"] = errors
    return body


# Exception handlers
@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    """API callers get 401; browsers are sent to the login page."""
    if is_api_request(request.url.path):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body("Unauthorized", exc.detail),
            headers=exc.headers,
        )
    return_url = request.url.path
    if request.url.query:
        return_url = f"{return_url}?{request.url.query}"
    return RedirectResponse(
        url=f"{settings.LOGIN_PATH}?{urlencode({'return_url': return_url})}",
        status_code=303,
    )


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    """API callers get 403; browsers are sent to the access denied page."""
    if is_api_request(request.url.path):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body("Forbidden", exc.detail),
        )
    return RedirectResponse(url=settings.ACCESS_DENIED_PATH, status_code=303)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(type(exc).__name__, exc.message, exc.errors),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for error in exc.errors():
        # Drop the leading "body"/"query" part of the location
        field = ".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0])
        errors.setdefault(field, error["msg"])
    return JSONResponse(
        status_code=400,
        content=_error_body("ValidationFailed", "Validation failed.", errors),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "The requested resource was not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.status_code), message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception(f"Internal server error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal Server Error", "An unexpected error occurred")
    )


# Include routers
for router in (
    auth_router,
    appointments_router,
    staff_router,
    users_router,
    roles_router,
    menus_router,
    dashboard_router,
):
    app.include_router(router, prefix="/api/v1")

for page in (account, dashboard, appointments, staff, users, roles, menus):
    app.include_router(page.router)


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info(f"Starting {settings.APP_NAME}...")

    # Check database connection
    db_url = settings.get_database_url
    db_type = "PostgreSQL" if "postgresql" in db_url else "SQLite" if "sqlite" in db_url else "Unknown"
    logger.info(f"Using {db_type} database")

    # Initialize database
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    if settings.SEED_ON_STARTUP:
        db = SessionLocal()
        try:
            if not seed(db):
                logger.info("Seed data already present")
        finally:
            db.close()

    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    logger.info(f"Shutting down {settings.APP_NAME}...")


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.VERSION
    }


@app.get("/")
async def root():
    """Send visitors to their dashboard; the gate handles anonymous callers."""
    return RedirectResponse(url="/dashboard", status_code=303)


# API Info endpoint
@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "authentication": "/api/v1/auth",
            "appointments": "/api/v1/appointments",
            "staff": "/api/v1/staff",
            "users": "/api/v1/users",
            "roles": "/api/v1/roles",
            "menus": "/api/v1/menus",
            "dashboard": "/api/v1/dashboard",
            "docs": "/docs",
            "openapi": "/api/v1/openapi.json"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "appointment_system.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
