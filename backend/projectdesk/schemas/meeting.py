"""
Meeting Schemas

Pydantic models for meetings and their transcripts, summaries and todos.
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from ..models.meeting import MeetingStatus
from ..models.todo import TodoPriority


class MeetingCreate(BaseModel):
    """Request to create a meeting."""
    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    meeting_date: datetime
    duration: int = Field(60, ge=0)
    status: MeetingStatus = MeetingStatus.SCHEDULED

    model_config = {"extra": "forbid"}


class MeetingUpdate(BaseModel):
    """Request to update a meeting. Only fields sent are changed."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    meeting_date: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=0)
    status: Optional[MeetingStatus] = None

    model_config = {"extra": "forbid"}


class TranscriptCreate(BaseModel):
    content: str = Field(..., min_length=1)
    speaker: Optional[str] = None
    timestamp_in_meeting: Optional[str] = None

    model_config = {"extra": "forbid"}


class TranscriptUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=1)
    speaker: Optional[str] = None
    timestamp_in_meeting: Optional[str] = None

    model_config = {"extra": "forbid"}


class SummaryCreate(BaseModel):
    content: str = Field(..., min_length=1)
    key_points: Optional[str] = None
    action_items: Optional[str] = None
    decisions: Optional[str] = None

    model_config = {"extra": "forbid"}


class SummaryUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=1)
    key_points: Optional[str] = None
    action_items: Optional[str] = None
    decisions: Optional[str] = None

    model_config = {"extra": "forbid"}


class MeetingTodoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[date] = None
    priority: TodoPriority = TodoPriority.MEDIUM
    completed: bool = False

    model_config = {"extra": "forbid"}


class MeetingTodoUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[TodoPriority] = None
    completed: Optional[bool] = None

    model_config = {"extra": "forbid"}


class TranscriptResponse(BaseModel):
    id: str
    meeting_id: str
    content: str
    speaker: Optional[str] = None
    timestamp_in_meeting: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SummaryResponse(BaseModel):
    id: str
    meeting_id: str
    content: str
    key_points: Optional[str] = None
    action_items: Optional[str] = None
    decisions: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MeetingTodoResponse(BaseModel):
    id: str
    meeting_id: str
    title: str
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[date] = None
    priority: TodoPriority
    completed: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MeetingResponse(BaseModel):
    """Meeting data returned from API, with its children."""
    id: str
    project_id: str
    title: str
    description: str = ""
    meeting_date: datetime
    duration: int
    status: MeetingStatus
    transcripts: List[TranscriptResponse] = []
    summaries: List[SummaryResponse] = []
    todos: List[MeetingTodoResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MeetingListResponse(BaseModel):
    """List of meetings."""
    meetings: List[MeetingResponse]
    total: int
