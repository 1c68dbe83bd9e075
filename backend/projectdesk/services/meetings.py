"""
Meeting Collection

Project meetings plus their transcripts, summaries and meeting todos.
Meetings are kept in the primary store only; no mirror endpoint
exists for them.
"""
import enum
import logging
from typing import Any, Dict, List

from sqlalchemy import select

from ..models.meeting import Meeting, MeetingSummary, MeetingTodo, MeetingTranscript
from ..models.project import Project
from ..tracer import trace_step
from .base import EntityCollection, EntityNotFoundError, MutationResult

logger = logging.getLogger(__name__)


class MeetingChildKind(str, enum.Enum):
    """The child collections of a meeting, by URL segment."""
    TRANSCRIPTS = "transcripts"
    SUMMARIES = "summaries"
    TODOS = "todos"

    @property
    def label(self) -> str:
        return {
            MeetingChildKind.TRANSCRIPTS: "transcript",
            MeetingChildKind.SUMMARIES: "summary",
            MeetingChildKind.TODOS: "meeting todo",
        }[self]

    @property
    def model(self):
        return {
            MeetingChildKind.TRANSCRIPTS: MeetingTranscript,
            MeetingChildKind.SUMMARIES: MeetingSummary,
            MeetingChildKind.TODOS: MeetingTodo,
        }[self]


class MeetingCollection(EntityCollection[Meeting]):
    """Meetings of the acting user's projects."""

    model = Meeting
    entity_name = "meeting"
    mirror_resource = None

    def _owned(self):
        return (
            select(Meeting)
            .join(Project, Meeting.project_id == Project.id)
            .where(Project.user_id == self.principal.user_id)
        )

    async def load(self, project_id: str) -> List[Meeting]:
        """Load a project's meetings, latest meeting date first."""
        await self.require_project(project_id)
        stmt = (
            self._owned()
            .where(Meeting.project_id == project_id)
            .order_by(Meeting.meeting_date.desc())
        )
        result = await self.db.execute(stmt)
        self.items = list(result.scalars().all())
        return self.items

    async def create(self, project_id: str, fields: Dict[str, Any]) -> MutationResult[Meeting]:
        await self.require_project(project_id)
        meeting = Meeting(
            project_id=project_id,
            transcripts=[],
            summaries=[],
            todos=[],
            **fields,
        )
        return await self._insert(meeting)

    async def update(self, meeting_id: str, changes: Dict[str, Any]) -> MutationResult[Meeting]:
        meeting = await self.get(meeting_id)
        return await self._apply_update(meeting, changes)

    # ---- children ----

    def _find_child(self, meeting: Meeting, kind: MeetingChildKind, child_id: str):
        for child in getattr(meeting, kind.value):
            if child.id == child_id:
                return child
        raise EntityNotFoundError(kind.label, child_id)

    async def add_child(self, meeting_id: str, kind: MeetingChildKind, fields: Dict[str, Any]):
        """Add a transcript, summary or todo to a meeting."""
        meeting = await self.get(meeting_id)
        child = kind.model(**fields)
        getattr(meeting, kind.value).append(child)

        await self._commit(f"add {kind.value} to")
        trace_step("services.meetings", f"Added {kind.value} {child.id} to meeting {meeting.id}")
        self._merge(meeting)
        return child

    async def update_child(
        self,
        meeting_id: str,
        kind: MeetingChildKind,
        child_id: str,
        changes: Dict[str, Any],
    ):
        """Apply a partial update to a meeting child."""
        meeting = await self.get(meeting_id)
        child = self._find_child(meeting, kind, child_id)
        for field, value in changes.items():
            setattr(child, field, value)

        await self._commit(f"update {kind.value} of")
        self._merge(meeting)
        return child

    async def delete_child(self, meeting_id: str, kind: MeetingChildKind, child_id: str) -> None:
        """Remove a meeting child."""
        meeting = await self.get(meeting_id)
        child = self._find_child(meeting, kind, child_id)
        getattr(meeting, kind.value).remove(child)

        await self._commit(f"delete {kind.value} of")
        trace_step("services.meetings", f"Deleted {kind.value} {child_id} from meeting {meeting.id}")
        self._merge(meeting)

    async def toggle_todo(self, meeting_id: str, todo_id: str, completed: bool) -> MeetingTodo:
        """Mark a meeting todo done or not done."""
        return await self.update_child(meeting_id, MeetingChildKind.TODOS, todo_id, {"completed": completed})
