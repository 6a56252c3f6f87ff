"""In-memory todo routes.

CRUD over the process-local todo list, under ``/users/{username}/todos``.
Every route requires a valid bearer token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from todoapi.core.logging import get_logger
from todoapi.domain.services import InMemoryTodoService
from todoapi.infrastructure.api.dependencies import get_current_claims, get_todo_service
from todoapi.infrastructure.api.schemas import TodoRequest, TodoResponse

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(get_current_claims)])

TodoService = Annotated[InMemoryTodoService, Depends(get_todo_service)]


def _not_found(todo_id: int) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Todo {todo_id} not found")


@router.get("", response_model=list[TodoResponse])
async def get_all_todos(username: str, service: TodoService) -> list[TodoResponse]:
    """List a user's todos."""
    return [TodoResponse.model_validate(todo) for todo in service.find_all(username)]


@router.get("/{todo_id}", response_model=TodoResponse)
async def get_todo(username: str, todo_id: int, service: TodoService) -> TodoResponse:
    """Get one todo."""
    todo = service.find_by_id(todo_id)
    if todo is None or todo.username != username:
        raise _not_found(todo_id)
    return TodoResponse.model_validate(todo)


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_todo(username: str, todo_id: int, service: TodoService) -> Response:
    """Delete a todo."""
    todo = service.find_by_id(todo_id)
    if todo is None or todo.username != username:
        raise _not_found(todo_id)
    service.delete_by_id(todo_id)
    logger.info("Todo deleted", username=username, todo_id=todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{todo_id}", response_model=TodoResponse)
async def update_todo(
    username: str, todo_id: int, body: TodoRequest, service: TodoService
) -> TodoResponse:
    """Replace a todo's fields."""
    existing = service.find_by_id(todo_id)
    if existing is None or existing.username != username:
        raise _not_found(todo_id)
    todo = service.save(body.to_entity(username, todo_id))
    return TodoResponse.model_validate(todo)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_todo(
    request: Request, username: str, body: TodoRequest, service: TodoService
) -> Response:
    """Create a todo; its URL is returned in the Location header."""
    todo = service.save(body.to_entity(username))
    logger.info("Todo created", username=username, todo_id=todo.id)
    return Response(
        status_code=status.HTTP_201_CREATED,
        headers={"Location": str(request.url_for("get_todo", username=username, todo_id=todo.id))},
    )
