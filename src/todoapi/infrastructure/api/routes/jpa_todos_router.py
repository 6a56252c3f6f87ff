"""Database-backed todo routes.

CRUD over the ``todos`` table, under ``/jpa/users/{username}/todos``.
Every route requires a valid bearer token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from todoapi.core.logging import get_logger
from todoapi.infrastructure.api.dependencies import get_current_claims
from todoapi.infrastructure.api.schemas import TodoRequest, TodoResponse
from todoapi.infrastructure.persistence.database import get_db_session
from todoapi.infrastructure.persistence.models import TodoModel
from todoapi.infrastructure.persistence.repositories import TodoRepository

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(get_current_claims)])

Session = Annotated[AsyncSession, Depends(get_db_session)]


def _not_found(todo_id: int) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Todo {todo_id} not found")


async def _get_owned(repo: TodoRepository, username: str, todo_id: int) -> TodoModel:
    model = await repo.get_by_id(todo_id)
    if model is None or model.username != username:
        raise _not_found(todo_id)
    return model


@router.get("", response_model=list[TodoResponse])
async def get_all_jpa_todos(username: str, session: Session) -> list[TodoResponse]:
    """List a user's todos."""
    models = await TodoRepository(session).find_by_username(username)
    return [TodoResponse.model_validate(model.to_entity()) for model in models]


@router.get("/{todo_id}", response_model=TodoResponse)
async def get_jpa_todo(username: str, todo_id: int, session: Session) -> TodoResponse:
    """Get one todo."""
    model = await _get_owned(TodoRepository(session), username, todo_id)
    return TodoResponse.model_validate(model.to_entity())


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_jpa_todo(username: str, todo_id: int, session: Session) -> Response:
    """Delete a todo."""
    repo = TodoRepository(session)
    await _get_owned(repo, username, todo_id)
    await repo.delete_by_id(todo_id)
    await session.commit()
    logger.info("Todo deleted", username=username, todo_id=todo_id, store="database")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{todo_id}", response_model=TodoResponse)
async def update_jpa_todo(
    username: str, todo_id: int, body: TodoRequest, session: Session
) -> TodoResponse:
    """Replace a todo's fields."""
    repo = TodoRepository(session)
    await _get_owned(repo, username, todo_id)
    model = await repo.update(
        todo_id,
        username=username,
        description=body.description,
        target_date=body.target_date,
        is_done=body.done,
    )
    await session.commit()
    return TodoResponse.model_validate(model.to_entity())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_jpa_todo(
    request: Request, username: str, body: TodoRequest, session: Session
) -> Response:
    """Create a todo owned by the path user; its URL is returned in the Location header."""
    model = await TodoRepository(session).create(
        TodoModel(
            username=username,
            description=body.description,
            target_date=body.target_date,
            is_done=body.done,
        )
    )
    await session.commit()
    logger.info("Todo created", username=username, todo_id=model.id, store="database")
    return Response(
        status_code=status.HTTP_201_CREATED,
        headers={
            "Location": str(request.url_for("get_jpa_todo", username=username, todo_id=model.id))
        },
    )
