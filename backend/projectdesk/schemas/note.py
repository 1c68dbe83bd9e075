"""
Note Schemas

Pydantic models for note and attachment API requests and responses.
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from ..models.note import NoteStatusCategory, NoteStatusType
from .sync import SyncFields


class NoteCreate(BaseModel):
    """Request to create a note."""
    title: str = Field(..., min_length=1, max_length=500)
    content: str = ""
    due_date: Optional[date] = None
    status_category: NoteStatusCategory = NoteStatusCategory.GENERAL
    status_type: Optional[NoteStatusType] = None

    model_config = {"extra": "forbid"}


class NoteUpdate(BaseModel):
    """Request to update a note. Only fields sent are changed."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = None
    due_date: Optional[date] = None
    status_category: Optional[NoteStatusCategory] = None
    status_type: Optional[NoteStatusType] = None

    model_config = {"extra": "forbid"}


class AttachmentResponse(BaseModel):
    """Attachment metadata."""
    id: str
    note_id: str
    name: str
    size: int
    type: str
    url: str
    created_at: datetime

    model_config = {"from_attributes": True}


class NoteResponse(SyncFields):
    """Note data returned from API."""
    id: str
    project_id: str
    title: str
    content: str
    due_date: Optional[date] = None
    status_category: NoteStatusCategory
    status_type: Optional[NoteStatusType] = None
    attachments: List[AttachmentResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NoteListResponse(BaseModel):
    """List of notes."""
    notes: List[NoteResponse]
    total: int
