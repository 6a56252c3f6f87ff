"""Pydantic schemas for todo endpoints.

Field names are camelCase on the wire (``targetDate``) and snake_case in Python.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from todoapi.domain.entities import Todo


class TodoRequest(BaseModel):
    """Request body for creating or updating a todo.

    ``id`` and ``username`` are accepted for compatibility but the values from
    the URL path always win.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int | None = None
    username: str | None = None
    description: str = Field(..., min_length=1, max_length=1024)
    target_date: datetime | None = None
    done: bool = False

    def to_entity(self, username: str, todo_id: int | None = None) -> Todo:
        return Todo(
            id=todo_id,
            username=username,
            description=self.description,
            target_date=self.target_date,
            done=self.done,
        )


class TodoResponse(BaseModel):
    """A stored todo."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    username: str
    description: str
    target_date: datetime | None = None
    done: bool
