"""In-memory todo storage.

Backs the ``/users/{username}/todos`` resource with a process-local list.
Nothing survives a restart; use the relational resource for that.
"""

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Iterable

from todoapi.domain.entities import Todo


class InMemoryTodoService:
    """Thread-safe list of todos with a monotonically increasing id counter."""

    def __init__(self, todos: Iterable[Todo] = ()) -> None:
        self._lock = threading.Lock()
        self._todos: list[Todo] = []
        self._counter = 0
        for todo in todos:
            self.save(todo)

    def find_all(self, username: str | None = None) -> list[Todo]:
        """Return copies of all todos, optionally only those owned by ``username``."""
        with self._lock:
            return [
                replace(todo)
                for todo in self._todos
                if username is None or todo.username == username
            ]

    def find_by_id(self, todo_id: int) -> Todo | None:
        with self._lock:
            for todo in self._todos:
                if todo.id == todo_id:
                    return replace(todo)
        return None

    def save(self, todo: Todo) -> Todo:
        """Insert a todo without an id, or replace the stored todo with the same id.

        A todo carrying an id that is not stored yet is inserted under that id.
        """
        with self._lock:
            if not todo.id:
                self._counter += 1
                stored = replace(todo, id=self._counter)
            else:
                self._counter = max(self._counter, todo.id)
                stored = replace(todo)
                for index, existing in enumerate(self._todos):
                    if existing.id == todo.id:
                        self._todos[index] = stored
                        return replace(stored)
            self._todos.append(stored)
            return replace(stored)

    def delete_by_id(self, todo_id: int) -> Todo | None:
        """Remove a todo, returning it, or None when no such todo exists."""
        with self._lock:
            for index, todo in enumerate(self._todos):
                if todo.id == todo_id:
                    return self._todos.pop(index)
        return None


def default_todos(username: str = "kokabmedia") -> list[Todo]:
    """Seed list used when the application starts."""
    today = datetime.now(timezone.utc)
    return [
        Todo(None, username, "Learn to Dance", today + timedelta(days=30)),
        Todo(None, username, "Learn about Microservices", today + timedelta(days=60)),
        Todo(None, username, "Learn about Angular", today + timedelta(days=90)),
    ]
