"""
Project Collection

A user's projects, loaded with their todos, notes, links and meetings.
Project mutations are mirrored to /projects.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..config import settings
from ..mirror import MirrorResource
from ..models.project import Project
from ..tracer import trace_step
from .base import EntityCollection, MutationResult

logger = logging.getLogger(__name__)


def project_payload(project: Project) -> Dict[str, Any]:
    """Full project row as sent to the mirror on create."""
    return {
        "id": project.id,
        "user_id": project.user_id,
        "title": project.title,
        "description": project.description,
        "color": project.color,
        "category": project.category,
        "status": project.status,
        "due_date": project.due_date,
        "created_at": project.created_at,
        "updated_at": project.updated_at,
    }


async def find_master_project(db: AsyncSession) -> Optional[Project]:
    """The template project, matched by title. The oldest one wins."""
    stmt = (
        select(Project)
        .where(func.lower(func.trim(Project.title)) == settings.master_project_title.lower())
        .order_by(Project.created_at)
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


class ProjectCollection(EntityCollection[Project]):
    """The acting user's projects."""

    model = Project
    entity_name = "project"
    mirror_resource = MirrorResource.PROJECTS

    def _owned(self):
        return (
            select(Project)
            .where(Project.user_id == self.principal.user_id)
            .options(
                selectinload(Project.todos),
                selectinload(Project.notes),
                selectinload(Project.links),
                selectinload(Project.meetings),
            )
        )

    def _create_payload(self, project: Project) -> Dict[str, Any]:
        return project_payload(project)

    async def load(self) -> List[Project]:
        """Load every project with its children, newest first."""
        stmt = self._owned().order_by(Project.created_at.desc())
        result = await self.db.execute(stmt)
        projects = list(result.scalars().all())

        if not self.principal.is_admin:
            projects = [p for p in projects if not settings.is_master_title(p.title)]

        self.items = projects
        trace_step("services.projects", f"Loaded {len(projects)} projects")
        return self.items

    async def create(self, fields: Dict[str, Any]) -> MutationResult[Project]:
        """Create a project owned by the acting user."""
        project = Project(
            user_id=self.principal.user_id,
            todos=[],
            notes=[],
            links=[],
            meetings=[],
            **fields,
        )
        result = await self._insert(project)
        logger.info(f"Created project {project.id}: {project.title}")
        return result

    async def update(self, project_id: str, changes: Dict[str, Any]) -> MutationResult[Project]:
        """Apply a partial update to a project."""
        project = await self.get(project_id)
        return await self._apply_update(project, changes)
