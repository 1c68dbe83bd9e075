"""
Layout Schemas

Pydantic models for the dashboard layout endpoints.
"""
from typing import List, Literal
from pydantic import BaseModel, Field


class TileSchema(BaseModel):
    """One dashboard tile."""
    id: str = Field(..., min_length=1, max_length=100)
    title: str
    size: Literal["small", "medium", "large"] = "small"

    model_config = {"extra": "forbid", "from_attributes": True}


class LayoutPayload(BaseModel):
    """A user's dashboard layout, in display order."""
    tiles: List[TileSchema]

    model_config = {"extra": "forbid"}
