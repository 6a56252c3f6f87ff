"""API route modules."""

from todoapi.infrastructure.api.routes.auth_router import create_auth_router
from todoapi.infrastructure.api.routes.jpa_todos_router import router as jpa_todos_router
from todoapi.infrastructure.api.routes.todos_router import router as todos_router

__all__ = [
    "create_auth_router",
    "jpa_todos_router",
    "todos_router",
]
