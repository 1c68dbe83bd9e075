"""
Todo Schemas

Pydantic models for todo API requests and responses.
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from ..models.todo import TodoPriority
from .sync import SyncFields


class TodoCreate(BaseModel):
    """Request to create a todo."""
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    completed: bool = False
    priority: TodoPriority = TodoPriority.MEDIUM
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None

    model_config = {"extra": "forbid"}


class TodoUpdate(BaseModel):
    """Request to update a todo. Only fields sent are changed."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[TodoPriority] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None

    model_config = {"extra": "forbid"}


class TodoToggle(BaseModel):
    """Request to mark a todo done or not done."""
    completed: bool

    model_config = {"extra": "forbid"}


class TodoResponse(SyncFields):
    """Todo data returned from API."""
    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    completed: bool
    priority: TodoPriority
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TodoListResponse(BaseModel):
    """List of todos."""
    todos: List[TodoResponse]
    total: int
