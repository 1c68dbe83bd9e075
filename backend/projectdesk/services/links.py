"""
Link Collection

Project links, mirrored to /links.
"""
from typing import Any, Dict, List

from sqlalchemy import select

from ..mirror import MirrorResource
from ..models.link import Link
from ..models.project import Project
from .base import EntityCollection, MutationResult


class LinkCollection(EntityCollection[Link]):
    """Links of the acting user's projects."""

    model = Link
    entity_name = "link"
    mirror_resource = MirrorResource.LINKS

    def _owned(self):
        return (
            select(Link)
            .join(Project, Link.project_id == Project.id)
            .where(Project.user_id == self.principal.user_id)
        )

    def _create_payload(self, link: Link) -> Dict[str, Any]:
        return {
            "id": link.id,
            "project_id": link.project_id,
            "title": link.title,
            "url": link.url,
            "username": link.username,
            "password": link.password,
            "description": link.description,
            "created_at": link.created_at,
        }

    async def load(self, project_id: str) -> List[Link]:
        await self.require_project(project_id)
        stmt = (
            self._owned()
            .where(Link.project_id == project_id)
            .order_by(Link.created_at.desc())
        )
        result = await self.db.execute(stmt)
        self.items = list(result.scalars().all())
        return self.items

    async def create(self, project_id: str, fields: Dict[str, Any]) -> MutationResult[Link]:
        await self.require_project(project_id)
        return await self._insert(Link(project_id=project_id, **fields))

    async def update(self, link_id: str, changes: Dict[str, Any]) -> MutationResult[Link]:
        link = await self.get(link_id)
        return await self._apply_update(link, changes)
