"""
api/main.py -- FastAPI application factory for Postboard.

Run with:  python main.py serve
           uvicorn asgi:app --reload

create_app() assembles everything explicitly:

  Settings -> UserStore / PostStore -> AuthService / PostService -> app.state

Routes get their service through small Depends() providers that read
app.state (auth.dependencies.get_auth_service,
api.routes.v1.posts.get_post_service). Tests pass their own stores to
create_app() instead of patching globals.

Lifespan builds the stores that were not injected, seeds the optional admin
account, and closes whatever it opened on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.errors import VALIDATION_FAILED, error_response
from api.models import HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.posts import router as posts_router
from auth.service import AuthService
from auth.store import UserStore
from core.config import Settings, get_settings
from core.results import Failure
from posts.service import PostService
from posts.store import PostStore

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("postboard.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


def _make_lifespan(settings: Settings, user_store: UserStore | None, post_store: PostStore | None):
    """Return a lifespan that owns only the stores it creates itself.

    Injected stores belong to the caller (usually a test fixture) and are
    left open on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Postboard API starting up")
        owned: list = []
        try:
            users = user_store
            if users is None:
                users = UserStore(settings.database_url)
                owned.append(users)
            posts = post_store
            if posts is None:
                posts = PostStore(settings.database_url)
                owned.append(posts)

            app.state.auth_service = AuthService(users, settings)
            app.state.post_service = PostService(posts)
            logger.info("Stores initialized (%d users)", users.count())

            if settings.default_admin_username and settings.default_admin_password:
                result = app.state.auth_service.ensure_admin(
                    settings.default_admin_username, settings.default_admin_password
                )
                if isinstance(result, Failure):
                    logger.error("Default admin not created: %s %s", result.message, result.field_errors)

            yield
        finally:
            for store in owned:
                store.close()
            logger.info("Postboard API shutdown complete")

    return lifespan


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_app(
    settings: Settings | None = None,
    user_store: UserStore | None = None,
    post_store: PostStore | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.getLogger("postboard").setLevel(settings.log_level.upper())

    app = FastAPI(
        title="Postboard API",
        description="Posts gated by per-post passwords, plus username/password accounts with JWT login.",
        version=VERSION,
        lifespan=_make_lifespan(settings, user_store, post_store),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Authorization"],
        max_age=3600,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %d %.1fms %s",
            request.method,
            request.url.path,
            response.status_code,
            ms,
            request.client.host if request.client else "unknown",
        )
        return response

    prefix = settings.api_prefix
    app.include_router(auth_router, prefix=prefix, tags=["Auth"])
    app.include_router(posts_router, prefix=prefix, tags=["Posts"])

    @app.get(f"{prefix}/health", tags=["Health"])
    async def health() -> HealthResponse:
        """Liveness probe. No auth, no database access."""
        return HealthResponse(version=VERSION)

    _register_exception_handlers(app)
    return app


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the api.models.ErrorResponse shape so clients parse
# every error the same way.
# ---------------------------------------------------------------------------


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Unparseable or mistyped request -> 400 with per-field messages."""
        field_errors: dict[str, str] = {}
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part != "body"]
            field_errors[".".join(loc) or "body"] = err.get("msg", "Invalid value.")
        return error_response(
            request,
            400,
            "Input values are not valid.",
            error=VALIDATION_FAILED,
            field_errors=field_errors,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(
            request,
            exc.status_code,
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected server errors.

        The traceback goes to the log only; the client gets a generic message.
        """
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return error_response(request, 500, "An unexpected error occurred.")
