"""
Sync Schemas

Mirror outcome fields shared by every mutation response, and the
outbox API models.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from ..mirror import SyncResult, SyncStatus
from ..models.sync import OutboxStatus


class SyncFields(BaseModel):
    """Mixin carrying the mirror outcome of a mutation."""
    sync_status: Optional[SyncStatus] = None
    sync_error: Optional[str] = None


def sync_fields(sync: Optional[SyncResult]) -> dict:
    """Response kwargs for a mutation's SyncResult."""
    if sync is None:
        return {}
    return {"sync_status": sync.status, "sync_error": sync.error}


class DeleteResponse(SyncFields):
    """Result of a delete."""
    status: str = "deleted"
    id: str


class OutboxEntryResponse(BaseModel):
    """A sync debt entry."""
    id: str
    resource: str
    op: str
    entity_id: Optional[str] = None
    status: OutboxStatus
    attempts: int
    last_error: Optional[str] = None
    next_attempt_at: datetime
    created_at: datetime
    delivered_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OutboxListResponse(BaseModel):
    """A user's sync debt."""
    entries: List[OutboxEntryResponse]
    total: int


class ReplayRequest(BaseModel):
    """Options for an outbox replay."""
    force: bool = False

    model_config = {"extra": "forbid"}


class ReplayResponse(BaseModel):
    """Outcome of an outbox replay."""
    delivered: int
    failed: int
    abandoned: int
    deferred: int
    errors: List[str] = []


def with_sync(response: SyncFields, sync: Optional[SyncResult]) -> SyncFields:
    """Copy of a response carrying a mutation's mirror outcome."""
    return response.model_copy(update=sync_fields(sync))
