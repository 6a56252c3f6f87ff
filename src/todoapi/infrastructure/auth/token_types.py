"""Claims carried by Todo API tokens and the errors raised when they are rejected."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenInvalidReason(str, Enum):
    """Why a presented token was rejected by the codec."""

    MALFORMED_STRUCTURE = "malformed_structure"
    SIGNATURE_MISMATCH = "signature_mismatch"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"


class AuthError(Exception):
    """Base exception for authentication errors."""

    pass


class TokenError(AuthError):
    """Base exception for token-related errors."""

    pass


class TokenInvalidError(TokenError):
    """Raised when a token fails structural, signature or time checks."""

    def __init__(self, reason: TokenInvalidReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or f"Token invalid: {reason.value}")


class IdentityVanishedError(TokenError):
    """Raised when a validly signed token names a user that no longer exists."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__("Token subject no longer exists")


class RefreshNotAllowedError(TokenError):
    """Raised when a token is asked to be refreshed outside its refresh window."""

    def __init__(self, message: str = "Token cannot be refreshed") -> None:
        super().__init__(message)


class TokenClaims(BaseModel):
    """Decoded payload of a token.

    Registered claims use their JWT names. Any extension claim found in the
    payload is kept as an extra field.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    sub: str = Field(..., min_length=1, description="Username the token was issued to")
    iat: int = Field(..., description="Unix timestamp when the token was issued")
    exp: int = Field(..., description="Unix timestamp when the token expires")
    nbf: Optional[int] = Field(None, description="Unix timestamp before which the token is not valid")
    roles: List[str] = Field(default_factory=list, description="Role labels of the subject")
    orig_iat: Optional[int] = Field(
        None, description="Issued-at of the login that started this refresh chain"
    )

    @property
    def username(self) -> str:
        """Alias for the subject claim."""
        return self.sub

    @property
    def session_started_at(self) -> int:
        """Issued-at of the original login, falling back to this token's own."""
        return self.orig_iat if self.orig_iat is not None else self.iat
