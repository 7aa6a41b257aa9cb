from __future__ import annotations

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Response, status

from ..repositories import Repository
from ..schemas import ErrorEnvelope, TodoIn, TodoOut
from .deps import get_repository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)

_STORE_FAILURE = {"model": ErrorEnvelope, "description": "Storage failure"}
_BAD_REQUEST = {"model": ErrorEnvelope, "description": "Invalid id or request body"}
_NOT_FOUND = {"model": ErrorEnvelope, "description": "Todo not found"}

# SQLite INTEGER PRIMARY KEY range; larger values cannot be bound
TodoId = Annotated[int, Path(ge=1, le=2**63 - 1, description="Todo id (positive 64-bit integer)")]


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description="Return every stored Todo item. The order is unspecified.",
    responses={500: _STORE_FAILURE},
)
def list_todos(repo: Repository = Depends(get_repository)) -> List[TodoOut]:
    """
    List all todos; an empty store yields an empty array.
    """
    return [TodoOut(**it) for it in repo.list_all()]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses={400: _BAD_REQUEST, 500: _STORE_FAILURE},
)
def create_todo(payload: TodoIn, repo: Repository = Depends(get_repository)) -> TodoOut:
    """
    Create a new Todo.
    """
    created = repo.insert(payload.todo)
    logger.info("Created todo id=%s", created["id"])
    return TodoOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses={400: _BAD_REQUEST, 404: _NOT_FOUND, 500: _STORE_FAILURE},
)
def get_todo(todo_id: TodoId, repo: Repository = Depends(get_repository)) -> TodoOut:
    """
    Retrieve a single Todo item by its ID.
    """
    return TodoOut(**repo.get_by_id(todo_id))


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update Todo",
    description="Replace the text of an existing Todo item and refresh its updatedAt timestamp.",
    responses={400: _BAD_REQUEST, 404: _NOT_FOUND, 500: _STORE_FAILURE},
)
def put_todo(todo_id: TodoId, payload: TodoIn, repo: Repository = Depends(get_repository)) -> TodoOut:
    """
    Update the body of a Todo item. Repeating the same update succeeds.
    """
    updated = repo.update(todo_id, payload.todo)
    logger.info("Updated todo id=%s", todo_id)
    return TodoOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    summary="Delete Todo",
    description="Delete a Todo item by ID. Deleting an id that does not exist also succeeds.",
    responses={200: {"description": "Todo deleted (empty body)"}, 400: _BAD_REQUEST, 500: _STORE_FAILURE},
)
def delete_todo(todo_id: TodoId, repo: Repository = Depends(get_repository)) -> Response:
    """
    Delete a Todo. Returns 200 with an empty body.
    """
    repo.delete_by_id(todo_id)
    logger.info("Deleted todo id=%s", todo_id)
    return Response(status_code=status.HTTP_200_OK)
