"""
Project Schemas

Pydantic models for project API requests and responses.
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from ..models.project import ProjectStatus, ProjectCategory
from .sync import SyncFields
from .todo import TodoResponse
from .note import NoteResponse
from .link import LinkResponse
from .meeting import MeetingResponse


class ProjectCreate(BaseModel):
    """Request to create a new project."""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    color: str = Field("#3B82F6", max_length=20)
    status: ProjectStatus = ProjectStatus.ACTIVE
    category: ProjectCategory = ProjectCategory.MAIN
    due_date: Optional[date] = None

    model_config = {"extra": "forbid"}


class ProjectUpdate(BaseModel):
    """Request to update a project. Only fields sent are changed."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)
    status: Optional[ProjectStatus] = None
    category: Optional[ProjectCategory] = None
    due_date: Optional[date] = None

    model_config = {"extra": "forbid"}


class ProjectResponse(SyncFields):
    """Project data returned from API."""
    id: str
    user_id: str
    title: str
    description: str = ""
    color: str
    status: ProjectStatus
    category: ProjectCategory
    due_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectDetailResponse(ProjectResponse):
    """Project with its todos, notes, links and meetings."""
    todos: List[TodoResponse] = []
    notes: List[NoteResponse] = []
    links: List[LinkResponse] = []
    meetings: List[MeetingResponse] = []


class ProjectListResponse(BaseModel):
    """List of projects."""
    projects: List[ProjectDetailResponse]
    total: int
