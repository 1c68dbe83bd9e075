"""Notes: current status exclusivity and attachments."""
import json
import os

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from projectdesk.models.note import Attachment, NoteStatusCategory, NoteStatusType
from projectdesk.services import EntityNotFoundError, NoteCollection, PrimaryStoreError


@pytest.fixture
def notes(db, principal, mirror, storage):
    return NoteCollection(db, principal, mirror, storage)


class TestCurrentStatus:

    @pytest.mark.asyncio
    async def test_new_current_status_demotes_previous(self, notes, recorder, project):
        first = await notes.create(project.id, {
            "title": "Waiting on PO",
            "status_category": NoteStatusCategory.CURRENT_STATUS,
            "status_type": NoteStatusType.CUSTOMER,
        })
        second = await notes.create(project.id, {
            "title": "Testing in progress",
            "status_category": NoteStatusCategory.CURRENT_STATUS,
        })

        assert first.entity.status_category == NoteStatusCategory.GENERAL
        assert first.entity.status_type is None
        assert second.entity.status_category == NoteStatusCategory.CURRENT_STATUS
        assert second.entity.status_type == NoteStatusType.ME

        assert recorder.calls()[-2:] == [("POST", "/api/vps-notes"), ("PUT", "/api/vps-notes")]
        assert json.loads(recorder.requests[-1].content) == {
            "id": first.entity_id,
            "status_category": "general",
            "status_type": None,
        }

    @pytest.mark.asyncio
    async def test_update_to_current_status_keeps_only_the_updated_note(self, notes, project):
        current = await notes.create(project.id, {
            "title": "Old status",
            "status_category": NoteStatusCategory.CURRENT_STATUS,
        })
        general = await notes.create(project.id, {"title": "Meeting prep"})

        await notes.update(general.entity_id, {"status_category": NoteStatusCategory.CURRENT_STATUS})
        await notes.load(project.id)

        by_id = {n.id: n for n in notes.items}
        assert by_id[general.entity_id].status_category == NoteStatusCategory.CURRENT_STATUS
        assert by_id[current.entity_id].status_category == NoteStatusCategory.GENERAL

    @pytest.mark.asyncio
    async def test_moving_to_general_clears_status_type(self, notes, project):
        created = await notes.create(project.id, {
            "title": "Blocked",
            "status_category": NoteStatusCategory.CURRENT_STATUS,
            "status_type": NoteStatusType.CUSTOMER,
        })

        result = await notes.update(created.entity_id, {"status_category": NoteStatusCategory.GENERAL})

        assert result.entity.status_type is None


class TestAttachments:

    @pytest.mark.asyncio
    async def test_upload_and_delete_attachment(self, db, notes, storage, principal, project):
        note = (await notes.create(project.id, {"title": "Specs"})).entity

        attachment = await notes.upload_attachment(note.id, "drawing.PDF", b"%PDF-1.4", "application/pdf")

        assert attachment.name.startswith(f"{principal.user_id}/{note.id}/")
        assert attachment.name.endswith(".pdf")
        assert attachment.size == 8
        assert attachment.url == f"/media/attachments/{attachment.name}"
        path = os.path.join(str(storage.root), "attachments", attachment.name)
        assert os.path.exists(path)
        assert [a.id for a in note.attachments] == [attachment.id]

        await notes.delete_attachment(attachment.id)

        assert not os.path.exists(path)
        assert (await db.execute(select(Attachment))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_failed_attachment_delete_keeps_the_file(self, db, notes, storage, project, monkeypatch):
        note = (await notes.create(project.id, {"title": "Invoices"})).entity
        attachment = await notes.upload_attachment(note.id, "march.pdf", b"%PDF")
        path = os.path.join(str(storage.root), "attachments", attachment.name)

        async def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", failing_commit)

        with pytest.raises(PrimaryStoreError):
            await notes.delete_attachment(attachment.id)

        assert os.path.exists(path)

    @pytest.mark.asyncio
    async def test_attachment_of_foreign_note_is_not_found(self, db, other_principal, storage, notes, project):
        note = (await notes.create(project.id, {"title": "Private"})).entity
        attachment = await notes.upload_attachment(note.id, "a.txt", b"x")

        with pytest.raises(EntityNotFoundError):
            await NoteCollection(db, other_principal, storage=storage).delete_attachment(attachment.id)

    @pytest.mark.asyncio
    async def test_deleting_note_removes_files(self, notes, storage, project):
        note = (await notes.create(project.id, {"title": "Scans"})).entity
        attachment = await notes.upload_attachment(note.id, "scan.png", b"png")
        path = os.path.join(str(storage.root), "attachments", attachment.name)

        await notes.delete(note.id)

        assert notes.items == []
        assert not os.path.exists(path)
