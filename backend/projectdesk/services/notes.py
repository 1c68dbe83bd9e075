"""
Note Collection

Project notes and their attachments. Notes are mirrored to /vps-notes;
attachments live in primary file storage only.

A project has at most one "current status" note. Saving a note as
current status moves the project's other current status notes back to
general in the same commit, and mirrors each of those moves. Nothing
in the database enforces this, so two concurrent saves can still
leave two current status notes behind.
"""
import functools
import logging
import time
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from ..mirror import MirrorOp, MirrorResource
from ..models.note import Attachment, Note, NoteStatusCategory, NoteStatusType
from ..models.project import Project
from ..tracer import trace_step
from .base import EntityCollection, EntityNotFoundError, MutationResult, PrimaryStoreError
from .storage import ATTACHMENTS_BUCKET, LocalFileStorage, StorageError, file_extension, get_storage

logger = logging.getLogger(__name__)


def _normalize_status(fields: Dict[str, Any], creating: bool = False) -> Dict[str, Any]:
    category = fields.get("status_category")
    if category == NoteStatusCategory.GENERAL:
        return {**fields, "status_type": None}
    if category == NoteStatusCategory.CURRENT_STATUS and creating and not fields.get("status_type"):
        return {**fields, "status_type": NoteStatusType.ME}
    return fields


class NoteCollection(EntityCollection[Note]):
    """Notes of the acting user's projects."""

    model = Note
    entity_name = "note"
    mirror_resource = MirrorResource.NOTES

    def __init__(self, db, principal, mirror=None, storage: Optional[LocalFileStorage] = None):
        super().__init__(db, principal, mirror)
        self.storage = storage or get_storage()

    def _owned(self):
        return (
            select(Note)
            .join(Project, Note.project_id == Project.id)
            .where(Project.user_id == self.principal.user_id)
        )

    def _create_payload(self, note: Note) -> Dict[str, Any]:
        return {
            "id": note.id,
            "project_id": note.project_id,
            "title": note.title,
            "content": note.content,
            "due_date": note.due_date,
            "status_category": note.status_category,
            "status_type": note.status_type,
            "created_at": note.created_at,
            "updated_at": note.updated_at,
        }

    async def load(self, project_id: str) -> List[Note]:
        await self.require_project(project_id)
        stmt = (
            self._owned()
            .where(Note.project_id == project_id)
            .order_by(Note.created_at.desc())
        )
        result = await self.db.execute(stmt)
        self.items = list(result.scalars().all())
        return self.items

    # ---- current status ----

    async def _demote_current_status(self, project_id: str, keep_id: Optional[str] = None) -> List[Note]:
        """Move other current status notes of a project to general (uncommitted)."""
        stmt = select(Note).where(
            Note.project_id == project_id,
            Note.status_category == NoteStatusCategory.CURRENT_STATUS,
        )
        if keep_id:
            stmt = stmt.where(Note.id != keep_id)
        result = await self.db.execute(stmt)
        demoted = list(result.scalars().all())

        for note in demoted:
            note.status_category = NoteStatusCategory.GENERAL
            note.status_type = None
        return demoted

    async def _mirror_demotions(self, demoted: List[Note]) -> None:
        changes = {"status_category": NoteStatusCategory.GENERAL, "status_type": None}
        for note in demoted:
            trace_step("services.notes", f"Moved note {note.id} to general")
            await self._mirror(MirrorOp.UPDATE, note.id, functools.partial(self._update_payload, note, changes))
            self._merge(note)

    # ---- mutations ----

    async def create(self, project_id: str, fields: Dict[str, Any]) -> MutationResult[Note]:
        await self.require_project(project_id)
        fields = _normalize_status(fields, creating=True)

        demoted = []
        if fields.get("status_category") == NoteStatusCategory.CURRENT_STATUS:
            demoted = await self._demote_current_status(project_id)

        result = await self._insert(Note(project_id=project_id, attachments=[], **fields))
        await self._mirror_demotions(demoted)
        return result

    async def update(self, note_id: str, changes: Dict[str, Any]) -> MutationResult[Note]:
        note = await self.get(note_id)
        changes = _normalize_status(changes)

        demoted = []
        if changes.get("status_category") == NoteStatusCategory.CURRENT_STATUS:
            demoted = await self._demote_current_status(note.project_id, keep_id=note.id)

        result = await self._apply_update(note, changes)
        await self._mirror_demotions(demoted)
        return result

    async def delete(self, note_id: str) -> MutationResult[Note]:
        note = await self.get(note_id)
        keys = [attachment.name for attachment in note.attachments]

        result = await super().delete(note_id)
        if keys:
            try:
                await self.storage.remove(ATTACHMENTS_BUCKET, keys)
            except StorageError as e:
                logger.warning(f"Attachment files of deleted note {note_id} were not removed: {e}")
        return result

    # ---- attachments ----

    async def upload_attachment(
        self,
        note_id: str,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> Attachment:
        """Store a file and attach it to a note."""
        note = await self.get(note_id)
        key = f"{self.principal.user_id}/{note.id}/{int(time.time() * 1000)}.{file_extension(filename)}"
        url = await self.storage.save(ATTACHMENTS_BUCKET, key, data)

        attachment = Attachment(
            name=key,
            size=len(data),
            type=content_type or "application/octet-stream",
            url=url,
        )
        note.attachments.append(attachment)
        try:
            await self._commit("attach file to")
        except PrimaryStoreError:
            try:
                await self.storage.remove(ATTACHMENTS_BUCKET, [key])
            except StorageError as e:
                logger.warning(f"Orphaned attachment file {key}: {e}")
            raise

        logger.info(f"Attached {filename} ({len(data)} bytes) to note {note.id}")
        self._merge(note)
        return attachment

    async def delete_attachment(self, attachment_id: str) -> str:
        """Remove an attachment row, then its file. Returns the note id."""
        stmt = (
            select(Attachment)
            .join(Note, Attachment.note_id == Note.id)
            .join(Project, Note.project_id == Project.id)
            .where(
                Attachment.id == attachment_id,
                Project.user_id == self.principal.user_id,
            )
        )
        result = await self.db.execute(stmt)
        attachment = result.scalar_one_or_none()
        if attachment is None:
            raise EntityNotFoundError("attachment", attachment_id)

        note = await self.get(attachment.note_id)
        key = attachment.name

        note.attachments.remove(attachment)
        await self._commit("remove attachment from")
        trace_step("services.notes", f"Removed attachment {attachment_id} from note {note.id}")

        try:
            await self.storage.remove(ATTACHMENTS_BUCKET, [key])
        except StorageError as e:
            logger.warning(f"File of removed attachment {attachment_id} was not deleted: {e}")

        self._merge(note)
        return note.id
