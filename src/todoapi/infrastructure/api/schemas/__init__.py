"""API request and response schemas."""

from todoapi.infrastructure.api.schemas.auth_schemas import (
    AuthenticationBean,
    ErrorResponse,
    TokenRequest,
    TokenResponse,
)
from todoapi.infrastructure.api.schemas.todo_schemas import TodoRequest, TodoResponse

__all__ = [
    "AuthenticationBean",
    "ErrorResponse",
    "TodoRequest",
    "TodoResponse",
    "TokenRequest",
    "TokenResponse",
]
