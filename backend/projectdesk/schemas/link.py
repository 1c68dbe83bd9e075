"""
Link Schemas

Pydantic models for link API requests and responses.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from .sync import SyncFields


class LinkCreate(BaseModel):
    """Request to create a link. Title and URL are required."""
    title: str = Field(..., min_length=1, max_length=500)
    url: str = Field(..., min_length=1)
    username: Optional[str] = None
    password: Optional[str] = None
    description: Optional[str] = None

    model_config = {"extra": "forbid"}


class LinkUpdate(BaseModel):
    """Request to update a link. Only fields sent are changed."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    url: Optional[str] = Field(None, min_length=1)
    username: Optional[str] = None
    password: Optional[str] = None
    description: Optional[str] = None

    model_config = {"extra": "forbid"}


class LinkResponse(SyncFields):
    """Link data returned from API."""
    id: str
    project_id: str
    title: str
    url: str
    username: Optional[str] = None
    password: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class LinkListResponse(BaseModel):
    """List of links."""
    links: List[LinkResponse]
    total: int
