"""
Notes API

Endpoints for project notes and their attachments.
"""
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import Principal, get_principal
from ..database import get_db
from ..mirror import MirrorWriter
from ..schemas.note import NoteCreate, NoteUpdate, NoteResponse, NoteListResponse, AttachmentResponse
from ..schemas.sync import DeleteResponse, sync_fields, with_sync
from ..services.notes import NoteCollection
from ..services.storage import LocalFileStorage
from .deps import get_file_storage, get_mirror_writer

router = APIRouter(tags=["notes"])


@router.get("/projects/{project_id}/notes", response_model=NoteListResponse)
async def list_notes(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """List a project's notes, newest first, with attachments."""
    notes = await NoteCollection(db, principal, storage=storage).load(project_id)
    return NoteListResponse(
        notes=[NoteResponse.model_validate(n) for n in notes],
        total=len(notes),
    )


@router.post("/projects/{project_id}/notes", response_model=NoteResponse)
async def create_note(
    project_id: str,
    data: NoteCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """
    Create a note.

    A note created as current status moves the project's previous
    current status note to general.
    """
    notes = NoteCollection(db, principal, mirror, storage)
    result = await notes.create(project_id, data.model_dump(exclude_unset=True))
    return with_sync(NoteResponse.model_validate(result.entity), result.sync)


@router.patch("/notes/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: str,
    data: NoteUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    notes = NoteCollection(db, principal, mirror, storage)
    result = await notes.update(note_id, data.model_dump(exclude_unset=True))
    return with_sync(NoteResponse.model_validate(result.entity), result.sync)


@router.delete("/notes/{note_id}", response_model=DeleteResponse)
async def delete_note(
    note_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """Delete a note and its attachments."""
    result = await NoteCollection(db, principal, mirror, storage).delete(note_id)
    return DeleteResponse(id=result.entity_id, **sync_fields(result.sync))


@router.post("/notes/{note_id}/attachments", response_model=AttachmentResponse)
async def upload_attachment(
    note_id: str,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """Attach a file to a note."""
    data = await file.read()
    attachment = await NoteCollection(db, principal, storage=storage).upload_attachment(
        note_id,
        file.filename or "file",
        data,
        file.content_type,
    )
    return AttachmentResponse.model_validate(attachment)


@router.delete("/attachments/{attachment_id}")
async def delete_attachment(
    attachment_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """Remove an attachment and its stored file."""
    note_id = await NoteCollection(db, principal, storage=storage).delete_attachment(attachment_id)
    return {"status": "deleted", "id": attachment_id, "note_id": note_id}
