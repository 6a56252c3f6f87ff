"""Domain services for the Todo API.

Services contain business logic that doesn't naturally fit within a single entity.
They have no dependencies on infrastructure or external frameworks.
"""

from todoapi.domain.services.todo_service import InMemoryTodoService, default_todos

__all__ = ["InMemoryTodoService", "default_todos"]
