"""
Todo Collection

Project todos, mirrored to /todos.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import select

from ..mirror import MirrorResource
from ..models.project import Project
from ..models.todo import Todo
from .base import EntityCollection, MutationResult

logger = logging.getLogger(__name__)


def _with_due_date(fields: Dict[str, Any]) -> Dict[str, Any]:
    # due_date follows end_date unless the caller set it
    if fields.get("end_date") is not None and "due_date" not in fields:
        return {**fields, "due_date": fields["end_date"]}
    return fields


class TodoCollection(EntityCollection[Todo]):
    """Todos of the acting user's projects."""

    model = Todo
    entity_name = "todo"
    mirror_resource = MirrorResource.TODOS

    def _owned(self):
        return (
            select(Todo)
            .join(Project, Todo.project_id == Project.id)
            .where(Project.user_id == self.principal.user_id)
        )

    def _create_payload(self, todo: Todo) -> Dict[str, Any]:
        return {
            "id": todo.id,
            "project_id": todo.project_id,
            "title": todo.title,
            "description": todo.description,
            "completed": todo.completed,
            "priority": todo.priority,
            "start_date": todo.start_date,
            "end_date": todo.end_date,
            "due_date": todo.due_date,
            "notes": todo.notes,
            "created_at": todo.created_at,
            "updated_at": todo.updated_at,
        }

    async def load(self, project_id: str) -> List[Todo]:
        """Load a project's todos, newest first."""
        await self.require_project(project_id)
        stmt = (
            self._owned()
            .where(Todo.project_id == project_id)
            .order_by(Todo.created_at.desc())
        )
        result = await self.db.execute(stmt)
        self.items = list(result.scalars().all())
        return self.items

    async def list_all(self) -> List[Todo]:
        """Load the acting user's todos across all projects."""
        stmt = self._owned().order_by(Todo.created_at.desc())
        result = await self.db.execute(stmt)
        self.items = list(result.scalars().all())
        return self.items

    async def create(self, project_id: str, fields: Dict[str, Any]) -> MutationResult[Todo]:
        """Create a todo in one of the acting user's projects."""
        await self.require_project(project_id)
        todo = Todo(project_id=project_id, **_with_due_date(fields))
        return await self._insert(todo)

    async def update(self, todo_id: str, changes: Dict[str, Any]) -> MutationResult[Todo]:
        """Apply a partial update to a todo."""
        todo = await self.get(todo_id)
        return await self._apply_update(todo, _with_due_date(changes))

    async def toggle(self, todo_id: str, completed: bool) -> MutationResult[Todo]:
        """Mark a todo done or not done."""
        todo = await self.get(todo_id)
        return await self._apply_update(todo, {"completed": completed})
