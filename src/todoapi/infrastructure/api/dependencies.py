"""FastAPI dependencies for authentication.

The auth components are built once by the application factory and kept on
``app.state``; these dependencies hand them to route handlers and guard
protected routes.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from starlette.concurrency import run_in_threadpool

from todoapi.core.config import Settings
from todoapi.core.logging import get_logger
from todoapi.domain.entities import Identity
from todoapi.domain.services import InMemoryTodoService
from todoapi.infrastructure.auth import (
    Authenticator,
    IdentityVanishedError,
    TokenClaims,
    TokenInvalidError,
    TokenService,
    UnauthorizedEntryPoint,
)

logger = get_logger(__name__)

_basic = HTTPBasic(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_entry_point(request: Request) -> UnauthorizedEntryPoint:
    return request.app.state.entry_point


def get_todo_service(request: Request) -> InMemoryTodoService:
    return request.app.state.todo_service


def extract_bearer_token(request: Request) -> str | None:
    """Pull the bearer token out of the configured request header.

    Args:
        request: Incoming request.

    Returns:
        The token, or None when the header is missing or not a Bearer credential.
    """
    header_name = get_app_settings(request).token_header
    value = request.headers.get(header_name)
    if not value:
        return None

    parts = value.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def reject(request: Request, reason: str) -> HTTPException:
    """Build the uniform 401 for a request without a usable token.

    The reason is logged but not sent to the client.
    """
    logger.info(
        "Authentication failed",
        reason=reason,
        method=request.method,
        path=request.url.path,
    )
    return get_entry_point(request).on_unauthorized(request).to_http_exception()


async def get_current_claims(
    request: Request,
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> TokenClaims:
    """Validate the bearer token of the current request.

    Raises:
        HTTPException: 401 from the entry point if the token is missing or invalid.
    """
    token = extract_bearer_token(request)
    if token is None:
        raise reject(request, "missing_token")

    try:
        return token_service.validate(token)
    except TokenInvalidError as e:
        raise reject(request, e.reason.value) from e
    except IdentityVanishedError as e:
        raise reject(request, "identity_vanished") from e


async def get_basic_identity(
    request: Request,
    credentials: Annotated[HTTPBasicCredentials | None, Depends(_basic)],
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
) -> Identity:
    """Authenticate the current request with HTTP Basic credentials.

    Raises:
        HTTPException: 401 with a Basic challenge on any failure.
    """
    challenge = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Basic"},
    )
    if credentials is None:
        logger.info("Basic authentication failed: missing credentials", path=request.url.path)
        raise challenge

    outcome = await run_in_threadpool(
        authenticator.verify, credentials.username, credentials.password
    )
    if not outcome.ok:
        raise challenge
    return outcome.unwrap()


# Type aliases for dependency injection
CurrentClaims = Annotated[TokenClaims, Depends(get_current_claims)]
BasicIdentity = Annotated[Identity, Depends(get_basic_identity)]
