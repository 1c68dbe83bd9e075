"""
Mirror Outbox

Durable sync debt. A mirror call that fails is recorded here with the
payload it would have sent, and replayed on request with retry and
exponential backoff.
"""
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Set, Tuple

from fastapi.encoders import jsonable_encoder
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import settings
from ..events import EventPublisher, SyncEventType
from ..models.sync import MirrorOutboxEntry, OutboxStatus
from ..tracer import traced, trace_step
from .client import (
    MirrorClient,
    MirrorError,
    MirrorHTTPError,
    MirrorOp,
    MirrorResource,
    MirrorUnavailableError,
)

logger = logging.getLogger(__name__)

# Longest delay between two replays of the same entry
MAX_BACKOFF = timedelta(hours=6)


@dataclass
class ReplayReport:
    """Outcome of one replay pass."""
    delivered: int = 0
    failed: int = 0
    abandoned: int = 0
    deferred: int = 0
    errors: List[str] = field(default_factory=list)


class MirrorOutbox:
    """
    Records and replays failed mirror calls.

    Replay keeps per-entity order: once an entry for an entity fails,
    later entries for the same entity wait for the next pass.
    """

    def __init__(
        self,
        db: AsyncSession,
        publisher: Optional[EventPublisher] = None,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[int] = None,
        replay_attempts: Optional[int] = None,
    ):
        self.db = db
        self.publisher = publisher
        self.max_attempts = max_attempts or settings.outbox_max_attempts
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.outbox_backoff_seconds
        self.replay_attempts = replay_attempts or settings.mirror_replay_attempts

    def next_attempt_after(self, attempts: int, now: Optional[datetime] = None) -> datetime:
        """When an entry that has failed `attempts` times may be retried."""
        now = now or datetime.utcnow()
        delay = timedelta(seconds=self.backoff_seconds * (2 ** max(attempts - 1, 0)))
        return now + min(delay, MAX_BACKOFF)

    async def record(
        self,
        *,
        user_id: str,
        op: MirrorOp,
        resource: MirrorResource,
        entity_id: Optional[str],
        payload: dict,
        error: str,
    ) -> str:
        """Persist a failed mirror call. Returns the outbox entry id."""
        entry = MirrorOutboxEntry(
            user_id=user_id,
            resource=resource.value,
            op=op.value,
            entity_id=entity_id,
            payload=json.dumps(jsonable_encoder(payload)),
            status=OutboxStatus.PENDING,
            attempts=1,
            last_error=error[:2000],
            next_attempt_at=self.next_attempt_after(1),
        )
        self.db.add(entry)
        await self.db.commit()

        logger.info(f"Recorded sync debt {entry.id}: {op.value} {resource.value} {entity_id}")
        return entry.id

    async def pending(self, user_id: str, include_abandoned: bool = False) -> List[MirrorOutboxEntry]:
        """List a user's undelivered entries, oldest first."""
        statuses = [OutboxStatus.PENDING]
        if include_abandoned:
            statuses.append(OutboxStatus.ABANDONED)

        stmt = (
            select(MirrorOutboxEntry)
            .where(
                MirrorOutboxEntry.user_id == user_id,
                MirrorOutboxEntry.status.in_(statuses),
            )
            .order_by(MirrorOutboxEntry.created_at, MirrorOutboxEntry.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _deliver(self, client: MirrorClient, entry: MirrorOutboxEntry, wait) -> None:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.replay_attempts),
            wait=wait,
            retry=retry_if_exception_type((MirrorUnavailableError, MirrorHTTPError)),
            reraise=True,
        ):
            with attempt:
                await client.send(
                    MirrorOp(entry.op),
                    MirrorResource(entry.resource),
                    json.loads(entry.payload),
                )

    @traced("mirror.outbox")
    async def replay(
        self,
        user_id: str,
        client: MirrorClient,
        *,
        force: bool = False,
        wait=None,
    ) -> ReplayReport:
        """
        Retry a user's due entries in creation order.

        Args:
            user_id: Owner of the entries (and of the client's token)
            client: Mirror client carrying that user's session
            force: Ignore next_attempt_at and retry every pending entry
            wait: tenacity wait strategy between in-pass attempts

        Returns:
            ReplayReport with per-outcome counts
        """
        report = ReplayReport()
        if not client.enabled:
            return report

        wait = wait or wait_exponential(
            multiplier=1,
            min=settings.mirror_backoff_min,
            max=settings.mirror_backoff_max,
        )
        now = datetime.utcnow()
        blocked: Set[Tuple[str, Optional[str]]] = set()

        for entry in await self.pending(user_id):
            key = (entry.resource, entry.entity_id)
            if key in blocked:
                report.deferred += 1
                continue
            if not force and entry.next_attempt_at > now:
                blocked.add(key)
                report.deferred += 1
                continue

            trace_step("mirror.outbox", f"Replaying {entry.op} {entry.resource} {entry.entity_id}")
            try:
                await self._deliver(client, entry, wait)
            except MirrorError as e:
                blocked.add(key)
                entry.attempts += 1
                entry.last_error = str(e)[:2000]
                if entry.attempts >= self.max_attempts:
                    entry.status = OutboxStatus.ABANDONED
                    report.abandoned += 1
                    logger.error(f"Abandoning sync debt {entry.id} after {entry.attempts} attempts: {e}")
                    await self._publish(user_id, SyncEventType.OUTBOX_ABANDONED, entry)
                else:
                    entry.next_attempt_at = self.next_attempt_after(entry.attempts, now)
                    report.failed += 1
                    logger.warning(f"Replay of sync debt {entry.id} failed: {e}")
                report.errors.append(f"{entry.op} {entry.resource} {entry.entity_id}: {e}")
            else:
                entry.status = OutboxStatus.DELIVERED
                entry.delivered_at = datetime.utcnow()
                report.delivered += 1
                await self._publish(user_id, SyncEventType.OUTBOX_DELIVERED, entry)

            await self.db.commit()

        logger.info(
            f"Outbox replay for {user_id}: {report.delivered} delivered, "
            f"{report.failed} failed, {report.abandoned} abandoned, {report.deferred} deferred"
        )
        return report

    async def _publish(self, user_id: str, event_type: SyncEventType, entry: MirrorOutboxEntry) -> None:
        if self.publisher is None:
            return
        await self.publisher.publish(
            user_id,
            event_type,
            f"{entry.op} {entry.resource} {event_type.value.split('_')[-1]}",
            resource=entry.resource,
            entity_id=entry.entity_id,
            data={"outbox_id": entry.id, "attempts": entry.attempts},
        )
