"""
Activity Tracker — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers, routers and
       static files, and returns the app; `app` is the module-level instance
       uvicorn serves (uvicorn activity_tracker.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────┐
    │                    FastAPI App                        │
    │                                                       │
    │  Middleware Chain:                                    │
    │  ┌──────────┐ ┌──────────┐ ┌────────────┐             │
    │  │ Session  │→│ Req ID   │→│ Access Log │             │
    │  └──────────┘ └──────────┘ └────────────┘             │
    │                                                       │
    │  Routes:                                              │
    │  ┌──────────────┐ ┌──────────┐ ┌──────────┐           │
    │  │ /activities… │ │ /users/… │ │ /health  │           │
    │  └──────────────┘ └──────────┘ └──────────┘           │
    │                                                       │
    │  Exception Handlers:                                  │
    │  ┌─────────────────────────────────────────────────┐  │
    │  │ AuthRequired→302 signin │ everything else→404   │  │
    │  └─────────────────────────────────────────────────┘  │
    └───────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → configuration check → optional schema creation
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from activity_tracker import __version__
from activity_tracker.config import settings
from activity_tracker.context import get_request_context
from activity_tracker.database import create_schema, dispose_engine
from activity_tracker.exceptions import (
    ActivityTrackerError,
    AuthenticationRequiredError,
    DatabaseError,
)
from activity_tracker.middleware.logging import RequestLoggingMiddleware
from activity_tracker.middleware.request_id import RequestIDMiddleware, request_id_var
from activity_tracker.routes import activities, health, users
from activity_tracker.views import STATIC_DIR, redirect, templates

logger = logging.getLogger(__name__)

ERROR_STATUS = 404


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    uvicorn's own access log and SQLAlchemy's statement echo are raised to
    WARNING; RequestLoggingMiddleware writes the access lines instead.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if settings.log_level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("Activity Tracker %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Development defaults are allowed; the warning stays visible in the log
        logger.warning("%s", str(e))

    if settings.auto_create_schema:
        await create_schema()
        logger.info("Database schema ensured")

    logger.info(
        "Activity Tracker is listening on port %d of %s!",
        settings.backend_port,
        settings.backend_host,
    )

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Activity Tracker shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def render_error(request: Request, message: str):
    """
    The single fallback page for every fatal condition.

    Messages already popped from the session by the request's context are
    shown here; otherwise they would be lost.
    """
    session = request.scope.get("session") or {}
    context = getattr(request.state, "context", None)
    return templates.TemplateResponse(
        request,
        "error.html",
        {
            "flash": context.consume_flash() if context is not None else [],
            "signed_in": bool(session.get("signed_in")),
            "username": session.get("username"),
            "message": message,
        },
        status_code=ERROR_STATUS,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to responses.

    Handler hierarchy:
        AuthenticationRequiredError → 302 to the sign-in page
        DatabaseError               → error page (details logged, never shown)
        ActivityTrackerError        → error page with the exception's message
        HTTPException / 422         → error page "Cannot get this path."
        Exception (fallback)        → error page, traceback logged

    Every page-level failure renders error.html with status 404.
    """

    @app.exception_handler(AuthenticationRequiredError)
    async def handle_authentication_required(request: Request, exc: AuthenticationRequiredError):
        return redirect(get_request_context(request), exc.location)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return render_error(request, exc.message)

    @app.exception_handler(ActivityTrackerError)
    async def handle_application_error(request: Request, exc: ActivityTrackerError):
        rid = request_id_var.get("")
        logger.warning(
            "[%s] %s on %s %s: %s | Context: %s",
            rid,
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
            exc.context,
        )
        return render_error(request, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        rid = request_id_var.get("")
        logger.warning("[%s] %s %s: %s", rid, request.method, request.url.path, exc.detail)
        return render_error(request, "Cannot get this path.")

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed request to %s: %s", rid, request.url.path, exc.errors())
        return render_error(request, "Cannot get this path.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=exc)
        return render_error(request, "An unexpected error occurred.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Activity Tracker",
        description="Track completed activities: what, which category, when, and for how long.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: Session → RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age,
        path="/",
        same_site="lax",
        https_only=settings.session_https_only,
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(health.router)
    app.include_router(activities.router)
    app.include_router(users.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured host/port."""
    import uvicorn

    uvicorn.run(
        "activity_tracker.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
