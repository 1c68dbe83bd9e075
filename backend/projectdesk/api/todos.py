"""
Todos API

Endpoints for project todos and the cross-project todo list.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import Principal, get_principal
from ..database import get_db
from ..mirror import MirrorWriter
from ..models.todo import Todo
from ..schemas.sync import DeleteResponse, sync_fields, with_sync
from ..schemas.todo import TodoCreate, TodoUpdate, TodoToggle, TodoResponse, TodoListResponse
from ..services.todos import TodoCollection
from .deps import get_mirror_writer

router = APIRouter(tags=["todos"])


def _todo_to_response(todo: Todo, sync=None) -> TodoResponse:
    return with_sync(TodoResponse.model_validate(todo), sync)


def _list_response(todos) -> TodoListResponse:
    return TodoListResponse(
        todos=[_todo_to_response(t) for t in todos],
        total=len(todos),
    )


@router.get("/projects/{project_id}/todos", response_model=TodoListResponse)
async def list_project_todos(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """List a project's todos, newest first."""
    return _list_response(await TodoCollection(db, principal).load(project_id))


@router.post("/projects/{project_id}/todos", response_model=TodoResponse)
async def create_todo(
    project_id: str,
    data: TodoCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
):
    """Create a todo in a project."""
    result = await TodoCollection(db, principal, mirror).create(project_id, data.model_dump(exclude_unset=True))
    return _todo_to_response(result.entity, result.sync)


@router.get("/todos", response_model=TodoListResponse)
async def list_all_todos(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """List the user's todos across all projects."""
    return _list_response(await TodoCollection(db, principal).list_all())


@router.patch("/todos/{todo_id}", response_model=TodoResponse)
async def update_todo(
    todo_id: str,
    data: TodoUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
):
    """Update a todo. Only the fields sent are changed."""
    result = await TodoCollection(db, principal, mirror).update(todo_id, data.model_dump(exclude_unset=True))
    return _todo_to_response(result.entity, result.sync)


@router.post("/todos/{todo_id}/toggle", response_model=TodoResponse)
async def toggle_todo(
    todo_id: str,
    data: TodoToggle,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
):
    """Mark a todo done or not done."""
    result = await TodoCollection(db, principal, mirror).toggle(todo_id, data.completed)
    return _todo_to_response(result.entity, result.sync)


@router.delete("/todos/{todo_id}", response_model=DeleteResponse)
async def delete_todo(
    todo_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
):
    """Delete a todo."""
    result = await TodoCollection(db, principal, mirror).delete(todo_id)
    return DeleteResponse(id=result.entity_id, **sync_fields(result.sync))
