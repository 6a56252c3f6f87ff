"""Rejection of requests that reach a protected resource without a valid token."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from fastapi import HTTPException, status

UNAUTHORIZED_MESSAGE = "You would need to provide the Jwt Token to Access This resource"


@dataclass(frozen=True)
class RejectionSignal:
    """What the HTTP layer sends back for an unauthenticated request."""

    status_code: int
    message: str
    headers: Mapping[str, str] = field(default_factory=dict)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail=self.message,
            headers=dict(self.headers),
        )


_SIGNAL = RejectionSignal(
    status_code=status.HTTP_401_UNAUTHORIZED,
    message=UNAUTHORIZED_MESSAGE,
    headers=MappingProxyType({"WWW-Authenticate": "Bearer"}),
)


class UnauthorizedEntryPoint:
    """Single funnel for missing or invalid tokens.

    The reason a token was refused never reaches the client.
    """

    def on_unauthorized(self, request_context: Any = None) -> RejectionSignal:
        return _SIGNAL
