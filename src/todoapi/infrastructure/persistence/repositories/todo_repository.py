"""Repository for todo operations.

Provides database operations for storing and managing todos.
"""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from todoapi.infrastructure.persistence.models import TodoModel


class TodoRepository:
    """Repository for todo database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    async def find_by_username(self, username: str) -> list[TodoModel]:
        """List a user's todos ordered by id.

        Args:
            username: Owner of the todos.

        Returns:
            List of todo models, possibly empty.
        """
        stmt = select(TodoModel).where(TodoModel.username == username).order_by(TodoModel.id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, todo_id: int) -> TodoModel | None:
        """Look up a todo by primary key."""
        return await self._session.get(TodoModel, todo_id)

    async def create(self, model: TodoModel) -> TodoModel:
        """Store a new todo.

        Args:
            model: The TodoModel to store.

        Returns:
            The stored model with its generated id.
        """
        self._session.add(model)
        await self._session.flush()
        return model

    async def update(
        self,
        todo_id: int,
        *,
        username: str,
        description: str,
        target_date: datetime | None,
        is_done: bool,
    ) -> TodoModel | None:
        """Overwrite the fields of an existing todo.

        Returns:
            The updated model, or None if no todo has that id.
        """
        model = await self.get_by_id(todo_id)
        if model is None:
            return None
        model.username = username
        model.description = description
        model.target_date = target_date
        model.is_done = is_done
        await self._session.flush()
        return model

    async def delete_by_id(self, todo_id: int) -> bool:
        """Delete a todo.

        Returns:
            True if a todo was deleted, False if not found.
        """
        result = await self._session.execute(delete(TodoModel).where(TodoModel.id == todo_id))
        return result.rowcount > 0
