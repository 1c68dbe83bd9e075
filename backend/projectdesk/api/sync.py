"""
Sync API

Sync debt inspection, manual replay, and the Server-Sent Events stream
of mirror outcomes.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import Principal, get_principal
from ..database import get_db
from ..events import get_event_publisher
from ..mirror import MirrorClient, MirrorOutbox
from ..schemas.sync import (
    OutboxEntryResponse,
    OutboxListResponse,
    ReplayRequest,
    ReplayResponse,
)
from .deps import get_mirror_client

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/outbox", response_model=OutboxListResponse)
async def list_outbox(
    include_abandoned: bool = False,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """List the user's undelivered mirror calls, oldest first."""
    entries = await MirrorOutbox(db).pending(principal.user_id, include_abandoned=include_abandoned)
    return OutboxListResponse(
        entries=[OutboxEntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.post("/replay", response_model=ReplayResponse)
async def replay_outbox(
    data: Optional[ReplayRequest] = None,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    client: MirrorClient = Depends(get_mirror_client),
):
    """Retry the user's due mirror calls with the user's own session."""
    outbox = MirrorOutbox(db, get_event_publisher())
    report = await outbox.replay(principal.user_id, client, force=bool(data and data.force))
    return ReplayResponse(
        delivered=report.delivered,
        failed=report.failed,
        abandoned=report.abandoned,
        deferred=report.deferred,
        errors=report.errors,
    )


@router.get("/events")
async def stream_events(
    request: Request,
    principal: Principal = Depends(get_principal),
):
    """
    Stream the user's sync events using Server-Sent Events.

    One event per mirror attempt:
    - mirror_synced / mirror_failed
    - outbox_recorded / outbox_delivered / outbox_abandoned
    """
    publisher = get_event_publisher()

    async def event_generator():
        async for event in publisher.subscribe(principal.user_id):
            if await request.is_disconnected():
                break
            yield event

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        }
    )
