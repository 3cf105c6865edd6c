"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance.
It handles:
1. Application initialization (logging, schema, development seed data)
2. Router registration
3. Middleware configuration (audit logging, security headers, CORS)
4. Exception handlers: the single place where domain errors become
   HTTP status codes and ErrorResponse bodies

Run with: uvicorn winereview.api.main:app --reload
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from winereview import __version__
from winereview.core.audit import AuditMiddleware, SecurityHeadersMiddleware
from winereview.core.config import Settings, get_settings
from winereview.core.exceptions import WineReviewerException
from winereview.core.logging_config import get_logger, setup_logging
from winereview.api.routes import (
    auth_router,
    comments_router,
    files_router,
    health_router,
    login_router,
    reviews_router,
    users_router,
    wines_router,
)
from winereview.models.common import ErrorResponse

logger = get_logger(__name__)


def _error_body(error: str, message: str, details: Optional[str] = None) -> dict:
    return ErrorResponse(error=error, message=message, details=details).model_dump(mode="json")


def _field_name(loc) -> str:
    # ("body", "rating") -> "rating"; ("query", "page") -> "page"
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header", "cookie")]
    return ".".join(parts) or "body"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: create missing tables and seed development data if enabled
    - Shutdown: dispose the connection pool
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} v{__version__} in {settings.app_env} mode")
    logger.info(f"Audit Logging: {settings.enable_audit_logging}")
    logger.info(f"Email login: {'enabled' if settings.enable_email_login else 'disabled'}")

    from winereview.database import get_database, init_tables, seed_development_data

    if settings.auto_create_tables:
        init_tables()
    if settings.seed_dev_data:
        seed_development_data()

    yield

    logger.info(f"Shutting down {settings.app_name}")
    get_database().close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application for the given (or environment) settings."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_dir)

    app = FastAPI(
        title="Wine Reviewer API",
        description="""
        Backend for the Wine Reviewer mobile app.

        ## Features

        - **Sign-in**: Exchange a Google ID token for a session token
        - **Reviews**: Rate wines 1-5 with tasting notes and a photo
        - **Comments**: Discuss reviews
        - **Uploads**: JPEG/PNG/WebP images up to 10 MB, stored in S3
        - **Ownership**: Only authors can change or delete their content;
          deleting anything removes everything that depends on it
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    # ============================================================
    # Middleware Configuration (last added runs first)
    # ============================================================

    app.add_middleware(SecurityHeadersMiddleware)

    if settings.enable_audit_logging:
        app.add_middleware(AuditMiddleware)
        logger.info("Audit logging middleware enabled")

    if settings.is_development():
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.warning("CORS configured for development (all origins allowed)")

    # ============================================================
    # Exception Handlers
    # ============================================================

    @app.exception_handler(WineReviewerException)
    async def domain_exception_handler(request: Request, exc: WineReviewerException):
        """Every domain error carries its own status code and error code."""
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(**exc.to_dict()).model_dump(mode="json"),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies, missing multipart parts and bad ids are client errors (400)."""
        errors = exc.errors()
        fields = sorted({_field_name(error.get("loc", ())) for error in errors})
        message = "; ".join(
            f"{_field_name(error.get('loc', ()))}: {error.get('msg', 'invalid')}" for error in errors
        )
        logger.warning(f"Rejected request {request.method} {request.url.path}: {message}")
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", message or "Invalid request", f"fields={','.join(fields)}"),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Handle uncaught exceptions globally.

        Detailed error information is only included in development mode.
        """
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_error",
                "An unexpected error occurred",
                str(exc) if settings.is_development() else None,
            ),
        )

    # ============================================================
    # Routers
    # ============================================================

    app.include_router(health_router)
    app.include_router(auth_router)
    if settings.enable_email_login:
        app.include_router(login_router)
    app.include_router(reviews_router)
    app.include_router(comments_router)
    app.include_router(files_router)
    app.include_router(users_router)
    app.include_router(wines_router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "Wine Reviewer API",
            "version": __version__,
            "documentation": "/docs",
            "health": "/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "winereview.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().is_development(),
    )
