import os

from dotenv import load_dotenv

# Load environment-specific .env file BEFORE any app imports
env = os.getenv("ENV", "local")
dotenv_file = f".env.{env}"
load_dotenv(dotenv_file)

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.db import get_db
from app.middleware import PerformanceMiddleware
from app.services.exceptions import (
    NotFoundError,
    RaceValidationError,
    ServiceError,
    UnauthenticatedError,
)
from app.utils import (
    logger,
    configure_sentry,
    is_debug,
    API_PREFIX,
)
from app.utils.response_utils import (
    error_code_for_status,
    error_response,
    internal_error,
    not_found_error,
    unauthorized_error,
    validation_error,
)
from app.utils.sentry_utils import capture_exception
from app.routers import (
    auth_router,
    races_router,
    billing_router,
)

# Initialize Sentry for error tracking (only in non-debug environments)
sentry_enabled = configure_sentry()
if sentry_enabled:
    logger.info("Sentry error tracking initialized")


app = FastAPI(
    title="Race Results Backend",
    description="Personal race results with Pro-tier filtering",
    version="0.1.0",
    docs_url="/docs" if is_debug() else None,
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(PerformanceMiddleware)

# Register routers
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(races_router, prefix=API_PREFIX)
app.include_router(billing_router, prefix=API_PREFIX)


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    """Translate domain errors into the standard error envelope."""
    if isinstance(exc, RaceValidationError):
        return validation_error(exc.message, field=exc.field)
    if isinstance(exc, NotFoundError):
        return not_found_error(message=exc.message)
    if isinstance(exc, UnauthenticatedError):
        return unauthorized_error(exc.message)
    return error_response(code=exc.code, message=exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed requests are 400s reporting the first problem only."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = f"{field}: {first['msg']}" if field else first["msg"]
    return validation_error(message, field=field or None)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(
        code=error_code_for_status(exc.status_code),
        message=str(exc.detail),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc.__class__.__name__}: {exc}",
        exc_info=True,
    )

    capture_exception(exc)

    return internal_error()


@app.get("/")
async def root():
    return {"message": "Welcome to Race Results Backend API", "version": "0.1.0"}


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check endpoint."""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "disconnected"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting Race Results Backend (env={env}, debug={is_debug()})")
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=is_debug())
