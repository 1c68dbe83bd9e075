"""
Mirror Writer

Replicates an already-committed primary mutation to the secondary
service. Whatever happens on the mirror side, the caller gets its
primary result: failures are logged, published as sync events and
recorded in the outbox, and reported back as a SyncResult.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..events import EventPublisher, SyncEventType
from ..tracer import trace_call, trace_result
from .client import MirrorClient, MirrorOp, MirrorResource
from .outbox import MirrorOutbox

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    """How a mutation fared on the mirror."""
    SYNCED = "synced"      # mirror acknowledged the call
    QUEUED = "queued"      # mirror failed, recorded in the outbox
    FAILED = "failed"      # mirror failed, nothing recorded
    SKIPPED = "skipped"    # mirroring disabled or entity not mirrored


@dataclass
class SyncResult:
    """Mirror outcome attached to every mutation result."""
    status: SyncStatus
    error: Optional[str] = None
    outbox_id: Optional[str] = None

    @property
    def in_debt(self) -> bool:
        return self.status in (SyncStatus.QUEUED, SyncStatus.FAILED)

    @classmethod
    def skipped(cls) -> "SyncResult":
        return cls(status=SyncStatus.SKIPPED)


class MirrorWriter:
    """
    Wraps primary mutations with a best-effort mirror call.

    One inline attempt per mutation; retries belong to outbox replay.
    """

    def __init__(
        self,
        client: MirrorClient,
        outbox: Optional[MirrorOutbox] = None,
        publisher: Optional[EventPublisher] = None,
    ):
        self.client = client
        self.outbox = outbox
        self.publisher = publisher

    async def mirror(
        self,
        op: MirrorOp,
        resource: MirrorResource,
        payload: dict,
        *,
        user_id: str,
        entity_id: Optional[str] = None,
    ) -> SyncResult:
        """
        Send one mutation to the mirror. Never raises.

        Args:
            op: create, update or delete
            resource: mirror endpoint
            payload: body to send (already shaped for the op)
            user_id: acting user, owner of any sync debt
            entity_id: primary id of the mutated row

        Returns:
            SyncResult describing the outcome
        """
        if not self.client.enabled:
            return SyncResult.skipped()

        trace_call("mirror.writer", f"{op.method} /{resource.value}", str(entity_id))
        try:
            await self.client.send(op, resource, payload)
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            logger.warning(f"Mirror sync failed for {resource.value} {op.value} ({entity_id}): {error}")
            trace_result("mirror.writer", op.method, False, error)

            outbox_id = await self._record_debt(op, resource, payload, user_id, entity_id, error)
            await self._publish(
                user_id,
                SyncEventType.OUTBOX_RECORDED if outbox_id else SyncEventType.MIRROR_FAILED,
                f"{op.value} {resource.value} not mirrored: {error}",
                resource,
                entity_id,
                {"outbox_id": outbox_id},
            )
            return SyncResult(
                status=SyncStatus.QUEUED if outbox_id else SyncStatus.FAILED,
                error=error,
                outbox_id=outbox_id,
            )

        trace_result("mirror.writer", op.method, True, entity_id)
        await self._publish(
            user_id,
            SyncEventType.MIRROR_SYNCED,
            f"{op.value} {resource.value} mirrored",
            resource,
            entity_id,
        )
        return SyncResult(status=SyncStatus.SYNCED)

    async def _record_debt(
        self,
        op: MirrorOp,
        resource: MirrorResource,
        payload: dict,
        user_id: str,
        entity_id: Optional[str],
        error: str,
    ) -> Optional[str]:
        if self.outbox is None:
            return None
        try:
            return await self.outbox.record(
                user_id=user_id,
                op=op,
                resource=resource,
                entity_id=entity_id,
                payload=payload,
                error=error,
            )
        except SQLAlchemyError as e:
            await self.outbox.db.rollback()
            logger.error(f"Could not record sync debt for {resource.value} {op.value} ({entity_id}): {e}")
            return None

    async def _publish(self, user_id, event_type, message, resource, entity_id, data=None) -> None:
        if self.publisher is None:
            return
        try:
            await self.publisher.publish(
                user_id,
                event_type,
                message,
                resource=resource.value,
                entity_id=entity_id,
                data=data,
            )
        except Exception as e:
            logger.error(f"Sync event publish failed: {e}")
