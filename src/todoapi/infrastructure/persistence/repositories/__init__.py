"""Persistence repositories for database operations."""

from todoapi.infrastructure.persistence.repositories.todo_repository import TodoRepository

__all__ = ["TodoRepository"]
