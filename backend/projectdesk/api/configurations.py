"""
Configuration API

Endpoints for a project's configurator blocks and BRD.
"""
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import Principal, get_principal
from ..database import get_db
from ..mirror import MirrorWriter
from ..schemas.configuration import BlocksSave, BrdUpdate, ConfigurationResponse
from ..services.configurations import BrdDocumentKind, ConfigurationService
from ..services.storage import LocalFileStorage
from .deps import get_file_storage, get_mirror_writer

router = APIRouter(prefix="/projects/{project_id}/configuration", tags=["configuration"])


def _service(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
    storage: LocalFileStorage = Depends(get_file_storage),
) -> ConfigurationService:
    return ConfigurationService(db, principal, mirror, storage)


@router.get("", response_model=ConfigurationResponse)
async def get_configuration(
    project_id: str,
    service: ConfigurationService = Depends(_service),
):
    """
    Get a project's configuration.

    Created on first access, with the default blocks. Blocks backed by
    non-empty master project blocks come back read-only.
    """
    return ConfigurationResponse.from_view(await service.load(project_id))


@router.put("/blocks", response_model=ConfigurationResponse)
async def save_blocks(
    project_id: str,
    data: BlocksSave,
    service: ConfigurationService = Depends(_service),
):
    """Save block text. Fails with 409 if any block is read-only."""
    return ConfigurationResponse.from_view(await service.save_blocks(project_id, data.blocks))


@router.post("/blocks/{block_id}/image", response_model=ConfigurationResponse)
async def upload_block_image(
    project_id: str,
    block_id: str,
    file: UploadFile = File(...),
    service: ConfigurationService = Depends(_service),
):
    data = await file.read()
    view = await service.upload_block_image(project_id, block_id, file.filename or "image", data)
    return ConfigurationResponse.from_view(view)


@router.delete("/blocks/{block_id}/image", response_model=ConfigurationResponse)
async def remove_block_image(
    project_id: str,
    block_id: str,
    service: ConfigurationService = Depends(_service),
):
    return ConfigurationResponse.from_view(await service.remove_block_image(project_id, block_id))


@router.patch("/brd", response_model=ConfigurationResponse)
async def update_brd(
    project_id: str,
    data: BrdUpdate,
    service: ConfigurationService = Depends(_service),
):
    return ConfigurationResponse.from_view(await service.update_brd(project_id, data.brd_content))


@router.post("/documents/{kind}", response_model=ConfigurationResponse)
async def upload_brd_document(
    project_id: str,
    kind: BrdDocumentKind,
    file: UploadFile = File(...),
    service: ConfigurationService = Depends(_service),
):
    """Upload the business profile or business map file."""
    data = await file.read()
    view = await service.upload_brd_document(project_id, kind, file.filename or kind.value, data)
    return ConfigurationResponse.from_view(view)


@router.delete("/documents/{kind}", response_model=ConfigurationResponse)
async def remove_brd_document(
    project_id: str,
    kind: BrdDocumentKind,
    service: ConfigurationService = Depends(_service),
):
    return ConfigurationResponse.from_view(await service.remove_brd_document(project_id, kind))
