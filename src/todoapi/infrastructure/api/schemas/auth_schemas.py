"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
    """Request body for obtaining a token.

    Both fields are optional here so that a missing field is reported as
    ``INVALID_INPUT`` by the authenticator rather than as a schema error.
    """

    username: str | None = Field(None, description="Login name")
    password: str | None = Field(None, description="Plaintext password")


class TokenResponse(BaseModel):
    """Response carrying a freshly issued token."""

    token: str = Field(..., description="JWT bearer token")


class AuthenticationBean(BaseModel):
    """Response for a successful HTTP Basic check."""

    message: str


class ErrorResponse(BaseModel):
    """Error body returned for refused logins and refreshes."""

    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
