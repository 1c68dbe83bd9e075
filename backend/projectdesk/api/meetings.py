"""
Meetings API

Endpoints for meetings and their transcripts, summaries and todos.
"""
from typing import Any, Dict, Type

from fastapi import APIRouter, Body, Depends
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import Principal, get_principal
from ..database import get_db
from ..schemas.meeting import (
    MeetingCreate,
    MeetingUpdate,
    MeetingResponse,
    MeetingListResponse,
    TranscriptCreate,
    TranscriptUpdate,
    TranscriptResponse,
    SummaryCreate,
    SummaryUpdate,
    SummaryResponse,
    MeetingTodoCreate,
    MeetingTodoUpdate,
    MeetingTodoResponse,
)
from ..schemas.todo import TodoToggle
from ..services.meetings import MeetingChildKind, MeetingCollection

router = APIRouter(tags=["meetings"])

# kind -> (create schema, update schema, response schema)
CHILD_SCHEMAS: Dict[MeetingChildKind, tuple] = {
    MeetingChildKind.TRANSCRIPTS: (TranscriptCreate, TranscriptUpdate, TranscriptResponse),
    MeetingChildKind.SUMMARIES: (SummaryCreate, SummaryUpdate, SummaryResponse),
    MeetingChildKind.TODOS: (MeetingTodoCreate, MeetingTodoUpdate, MeetingTodoResponse),
}


def _parse(schema: Type[BaseModel], payload: Dict[str, Any]) -> BaseModel:
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


@router.get("/projects/{project_id}/meetings", response_model=MeetingListResponse)
async def list_meetings(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """List a project's meetings, latest first, with their children."""
    meetings = await MeetingCollection(db, principal).load(project_id)
    return MeetingListResponse(
        meetings=[MeetingResponse.model_validate(m) for m in meetings],
        total=len(meetings),
    )


@router.post("/projects/{project_id}/meetings", response_model=MeetingResponse)
async def create_meeting(
    project_id: str,
    data: MeetingCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    result = await MeetingCollection(db, principal).create(project_id, data.model_dump())
    return MeetingResponse.model_validate(result.entity)


@router.patch("/meetings/{meeting_id}", response_model=MeetingResponse)
async def update_meeting(
    meeting_id: str,
    data: MeetingUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    result = await MeetingCollection(db, principal).update(meeting_id, data.model_dump(exclude_unset=True))
    return MeetingResponse.model_validate(result.entity)


@router.delete("/meetings/{meeting_id}")
async def delete_meeting(
    meeting_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Delete a meeting with its transcripts, summaries and todos."""
    await MeetingCollection(db, principal).delete(meeting_id)
    return {"status": "deleted", "id": meeting_id}


@router.post("/meetings/{meeting_id}/todos/{child_id}/toggle", response_model=MeetingTodoResponse)
async def toggle_meeting_todo(
    meeting_id: str,
    child_id: str,
    data: TodoToggle,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Mark a meeting todo done or not done."""
    todo = await MeetingCollection(db, principal).toggle_todo(meeting_id, child_id, data.completed)
    return MeetingTodoResponse.model_validate(todo)


@router.post("/meetings/{meeting_id}/{kind}")
async def add_meeting_child(
    meeting_id: str,
    kind: MeetingChildKind,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Add a transcript, summary or todo to a meeting."""
    create_schema, _, response_schema = CHILD_SCHEMAS[kind]
    data = _parse(create_schema, payload)

    child = await MeetingCollection(db, principal).add_child(meeting_id, kind, data.model_dump())
    return response_schema.model_validate(child)


@router.patch("/meetings/{meeting_id}/{kind}/{child_id}")
async def update_meeting_child(
    meeting_id: str,
    kind: MeetingChildKind,
    child_id: str,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    _, update_schema, response_schema = CHILD_SCHEMAS[kind]
    data = _parse(update_schema, payload)

    child = await MeetingCollection(db, principal).update_child(
        meeting_id, kind, child_id, data.model_dump(exclude_unset=True)
    )
    return response_schema.model_validate(child)


@router.delete("/meetings/{meeting_id}/{kind}/{child_id}")
async def delete_meeting_child(
    meeting_id: str,
    kind: MeetingChildKind,
    child_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    await MeetingCollection(db, principal).delete_child(meeting_id, kind, child_id)
    return {"status": "deleted", "id": child_id}
