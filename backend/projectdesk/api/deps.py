"""
API Dependencies

Per-request wiring of the mirror client, mirror writer and storage.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import Principal, get_principal
from ..config import settings
from ..database import get_db
from ..events import get_event_publisher
from ..mirror import MirrorClient, MirrorOutbox, MirrorWriter
from ..services.storage import LocalFileStorage, get_storage


def get_mirror_client(principal: Principal = Depends(get_principal)) -> MirrorClient:
    """Mirror client carrying the acting user's session."""
    return MirrorClient(
        settings.mirror_api_url,
        principal,
        timeout=settings.mirror_timeout,
    )


def get_mirror_writer(
    db: AsyncSession = Depends(get_db),
    client: MirrorClient = Depends(get_mirror_client),
) -> MirrorWriter:
    """Mirror writer recording sync debt in the request's session."""
    publisher = get_event_publisher()
    outbox = MirrorOutbox(db, publisher) if settings.mirror_outbox_enabled else None
    return MirrorWriter(client, outbox=outbox, publisher=publisher)


def get_file_storage() -> LocalFileStorage:
    return get_storage()
