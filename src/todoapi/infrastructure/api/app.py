"""FastAPI application factory and configuration.

This module provides the application factory function for creating and
configuring the FastAPI application with its auth components, middleware,
routes, and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from todoapi.core.config import Settings, get_settings
from todoapi.core.logging import bind_correlation_id, clear_context, configure_logging, get_logger
from todoapi.domain.services import InMemoryTodoService, default_todos
from todoapi.infrastructure.auth import (
    AuthenticationFailure,
    Authenticator,
    CredentialStore,
    FailureReason,
    RefreshNotAllowedError,
    TokenService,
    UnauthorizedEntryPoint,
    build_credential_store,
)
from todoapi.infrastructure.auth.token_codec import Clock, utc_now
from todoapi.infrastructure.persistence.database import close_database, init_database

logger = get_logger(__name__)

_FAILURE_MESSAGES = {
    FailureReason.INVALID_INPUT: "Username and password are required",
    FailureReason.INVALID_CREDENTIALS: "Invalid credentials",
    FailureReason.ACCOUNT_DISABLED: "User is disabled",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control is yielded to the application during its lifetime.
    """
    settings: Settings = app.state.settings
    configure_logging(settings)

    logger.info(
        "Starting Todo API",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await init_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Shutting down Todo API")
    await close_database()


def create_app(
    settings: Settings | None = None,
    store: CredentialStore | None = None,
    clock: Clock = utc_now,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The credential store, authenticator, token service and entry point are
    built here, once, and shared by every request through ``app.state``.

    Args:
        settings: Settings to use instead of the cached environment settings.
        store: Credential store to use instead of the configured one.
        clock: Time source for token issuance and validation.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    store = store if store is not None else build_credential_store(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Todo backend with HTTP Basic and JWT authentication",
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.credential_store = store
    app.state.authenticator = Authenticator(store)
    app.state.token_service = TokenService.from_settings(settings, store, clock=clock)
    app.state.entry_point = UnauthorizedEntryPoint()
    app.state.todo_service = InMemoryTodoService(default_todos())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app, settings)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """

    @app.get("/health", tags=["health"])
    async def health_check():
        """Returns 200 if the service is running."""
        return {
            "status": "healthy",
            "service": app.state.settings.app_name,
            "version": app.state.settings.app_version,
        }


def register_routes(app: FastAPI, settings: Settings) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
        settings: Settings providing the token endpoint paths.
    """
    from todoapi.infrastructure.api.routes import (
        create_auth_router,
        jpa_todos_router,
        todos_router,
    )

    app.include_router(create_auth_router(settings), tags=["auth"])
    app.include_router(todos_router, prefix="/users/{username}/todos", tags=["todos"])
    app.include_router(jpa_todos_router, prefix="/jpa/users/{username}/todos", tags=["todos"])


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(AuthenticationFailure)
    async def authentication_failure_handler(request: Request, exc: AuthenticationFailure):
        """Map a refused login to 400 (missing fields) or 401."""
        status_code = (
            status.HTTP_400_BAD_REQUEST
            if exc.reason is FailureReason.INVALID_INPUT
            else status.HTTP_401_UNAUTHORIZED
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.reason.value, "message": _FAILURE_MESSAGES[exc.reason]},
        )

    @app.exception_handler(RefreshNotAllowedError)
    async def refresh_not_allowed_handler(request: Request, exc: RefreshNotAllowedError):
        """A token outside its refresh window: the client must log in again."""
        logger.info("Refresh refused", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "REFRESH_NOT_ALLOWED", "message": str(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": str(exc) if app.state.settings.debug else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware.

    Args:
        app: FastAPI application instance.
    """

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log all requests and propagate a correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)

        logger.info("Request started", method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


# Create the application instance
app = create_app()
