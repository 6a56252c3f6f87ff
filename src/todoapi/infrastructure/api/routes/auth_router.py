"""Authentication API routes.

Provides endpoints for obtaining a token, refreshing it, and checking HTTP
Basic credentials. The token endpoint paths come from configuration, so the
router is built per application.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from starlette.concurrency import run_in_threadpool

from todoapi.core.config import Settings
from todoapi.core.logging import get_logger
from todoapi.infrastructure.api.dependencies import (
    BasicIdentity,
    extract_bearer_token,
    get_authenticator,
    get_token_service,
    reject,
)
from todoapi.infrastructure.api.schemas import (
    AuthenticationBean,
    ErrorResponse,
    TokenRequest,
    TokenResponse,
)
from todoapi.infrastructure.auth import Authenticator, IdentityVanishedError, TokenService

logger = get_logger(__name__)


def create_auth_router(settings: Settings) -> APIRouter:
    """Build the authentication router for the configured endpoint paths.

    Args:
        settings: Application settings providing ``token_uri`` and ``refresh_token_uri``.

    Returns:
        APIRouter: Router with the login, refresh and Basic check endpoints.
    """
    router = APIRouter()

    @router.post(
        settings.token_uri,
        status_code=status.HTTP_200_OK,
        response_model=TokenResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Username or password missing"},
            401: {"model": ErrorResponse, "description": "Invalid credentials or disabled user"},
        },
    )
    async def create_authentication_token(
        body: TokenRequest,
        authenticator: Annotated[Authenticator, Depends(get_authenticator)],
        token_service: Annotated[TokenService, Depends(get_token_service)],
    ) -> TokenResponse:
        """Exchange a username and password for a token.

        Password verification is slow on purpose, so it runs in the thread pool.
        """
        outcome = await run_in_threadpool(authenticator.verify, body.username, body.password)
        identity = outcome.unwrap()
        return TokenResponse(token=token_service.issue(identity))

    @router.get(
        settings.refresh_token_uri,
        status_code=status.HTTP_200_OK,
        response_model=TokenResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Token cannot be refreshed"},
            401: {"description": "Token missing"},
        },
    )
    async def refresh_and_get_authentication_token(
        request: Request,
        token_service: Annotated[TokenService, Depends(get_token_service)],
    ) -> TokenResponse:
        """Exchange a still-refreshable token from the request header for a new one."""
        token = extract_bearer_token(request)
        if token is None:
            raise reject(request, "missing_token")

        try:
            refreshed = token_service.refresh(token)
        except IdentityVanishedError as e:
            raise reject(request, "identity_vanished") from e
        return TokenResponse(token=refreshed)

    @router.get("/basicauth", response_model=AuthenticationBean)
    async def basic_authentication(identity: BasicIdentity) -> AuthenticationBean:
        """Confirm that HTTP Basic credentials are valid."""
        logger.debug("Basic authentication succeeded", username=identity.username)
        return AuthenticationBean(message="You are authenticated")

    return router
