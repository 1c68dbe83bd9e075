"""
Entity Collections

Shared write path for every per-entity collection:

1. write to the primary store (commit)
2. keep the canonical row the store returned
3. mirror the change (best effort, never raises)
4. update the in-memory list the caller renders from

Primary-store failures stop the sequence before step 3 and propagate.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..mirror import MirrorOp, MirrorResource, MirrorWriter, SyncResult, delete_body, update_body
from ..models.project import Project
from ..tracer import trace_step

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for service errors."""
    pass


class EntityNotFoundError(ServiceError):
    """The row does not exist or is not visible to the acting user."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")


class PrimaryStoreError(ServiceError):
    """The primary store rejected a write."""
    pass


class ReadOnlyBlockError(ServiceError):
    """An edit targeted a block inherited from the master project."""
    pass


ModelT = TypeVar("ModelT")


@dataclass
class MutationResult(Generic[ModelT]):
    """Canonical row (None after a delete) plus the mirror outcome."""
    entity_id: str
    entity: Optional[ModelT]
    sync: SyncResult


class EntityCollection(Generic[ModelT]):
    """
    Base class for entity collections.

    Subclasses set `model`, `entity_name` and, when the entity is
    mirrored, `mirror_resource`. They implement `_owned()` to scope
    queries to the acting user.
    """

    model: Any = None
    entity_name: str = "entity"
    mirror_resource: Optional[MirrorResource] = None

    def __init__(self, db: AsyncSession, principal, mirror: Optional[MirrorWriter] = None):
        self.db = db
        self.principal = principal
        self.mirror = mirror
        self.items: List[ModelT] = []

    # ---- scoping ----

    def _owned(self):
        """Select statement for rows owned by the acting user."""
        raise NotImplementedError

    async def get(self, entity_id: str) -> ModelT:
        """Fetch one owned row or raise EntityNotFoundError."""
        stmt = self._owned().where(self.model.id == entity_id)
        result = await self.db.execute(stmt)
        entity = result.scalar_one_or_none()
        if entity is None:
            raise EntityNotFoundError(self.entity_name, entity_id)
        return entity

    async def require_project(self, project_id: str) -> Project:
        """Fetch a project owned by the acting user."""
        stmt = select(Project).where(
            Project.id == project_id,
            Project.user_id == self.principal.user_id,
        )
        result = await self.db.execute(stmt)
        project = result.scalar_one_or_none()
        if project is None:
            raise EntityNotFoundError("project", project_id)
        return project

    # ---- mirror payloads ----

    def _create_payload(self, entity: ModelT) -> Dict[str, Any]:
        raise NotImplementedError

    def _update_payload(self, entity: ModelT, changes: Dict[str, Any]) -> Dict[str, Any]:
        return update_body(self.mirror_resource, self._mirror_key(entity), changes)

    def _delete_payload(self, entity: ModelT) -> Dict[str, Any]:
        return delete_body(self.mirror_resource, self._mirror_key(entity))

    def _mirror_key(self, entity: ModelT) -> str:
        return entity.id

    # ---- write path ----

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error trying to {action} {self.entity_name}: {e}")
            raise PrimaryStoreError(f"Failed to {action} {self.entity_name}") from e

    async def _mirror(self, op: MirrorOp, entity_id: str, build_payload: Callable[[], Dict[str, Any]]) -> SyncResult:
        """Mirror one change. The payload is only built for mirrored entities."""
        if self.mirror is None or self.mirror_resource is None:
            return SyncResult.skipped()
        return await self.mirror.mirror(
            op,
            self.mirror_resource,
            build_payload(),
            user_id=self.principal.user_id,
            entity_id=entity_id,
        )

    def _merge(self, entity: ModelT) -> None:
        self.items = [entity if item.id == entity.id else item for item in self.items]

    async def _insert(self, entity: ModelT) -> MutationResult[ModelT]:
        self.db.add(entity)
        await self._commit("create")
        trace_step("services", f"Created {self.entity_name} {entity.id}")

        sync = await self._mirror(MirrorOp.CREATE, self._mirror_key(entity), lambda: self._create_payload(entity))
        self.items.insert(0, entity)
        return MutationResult(entity_id=entity.id, entity=entity, sync=sync)

    async def _apply_update(self, entity: ModelT, changes: Dict[str, Any]) -> MutationResult[ModelT]:
        for field, value in changes.items():
            setattr(entity, field, value)
        await self._commit("update")
        trace_step("services", f"Updated {self.entity_name} {entity.id}: {sorted(changes)}")

        sync = await self._mirror(
            MirrorOp.UPDATE, self._mirror_key(entity), lambda: self._update_payload(entity, changes)
        )
        self._merge(entity)
        return MutationResult(entity_id=entity.id, entity=entity, sync=sync)

    async def delete(self, entity_id: str) -> MutationResult[ModelT]:
        """Delete an owned row, then mirror the delete."""
        entity = await self.get(entity_id)
        mirror_key = self._mirror_key(entity)
        payload = self._delete_payload(entity) if self.mirror_resource else {}

        await self.db.delete(entity)
        await self._commit("delete")
        trace_step("services", f"Deleted {self.entity_name} {entity_id}")

        sync = await self._mirror(MirrorOp.DELETE, mirror_key, lambda: payload)
        self.items = [item for item in self.items if item.id != entity_id]
        return MutationResult(entity_id=entity_id, entity=None, sync=sync)
