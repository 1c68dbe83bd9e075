"""
Links API

Endpoints for project links.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import Principal, get_principal
from ..database import get_db
from ..mirror import MirrorWriter
from ..schemas.link import LinkCreate, LinkUpdate, LinkResponse, LinkListResponse
from ..schemas.sync import DeleteResponse, sync_fields, with_sync
from ..services.links import LinkCollection
from .deps import get_mirror_writer

router = APIRouter(tags=["links"])


@router.get("/projects/{project_id}/links", response_model=LinkListResponse)
async def list_links(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    links = await LinkCollection(db, principal).load(project_id)
    return LinkListResponse(
        links=[LinkResponse.model_validate(link) for link in links],
        total=len(links),
    )


@router.post("/projects/{project_id}/links", response_model=LinkResponse)
async def create_link(
    project_id: str,
    data: LinkCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
):
    """Create a link. Title and URL are required."""
    result = await LinkCollection(db, principal, mirror).create(project_id, data.model_dump(exclude_unset=True))
    return with_sync(LinkResponse.model_validate(result.entity), result.sync)


@router.patch("/links/{link_id}", response_model=LinkResponse)
async def update_link(
    link_id: str,
    data: LinkUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
):
    result = await LinkCollection(db, principal, mirror).update(link_id, data.model_dump(exclude_unset=True))
    return with_sync(LinkResponse.model_validate(result.entity), result.sync)


@router.delete("/links/{link_id}", response_model=DeleteResponse)
async def delete_link(
    link_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
):
    result = await LinkCollection(db, principal, mirror).delete(link_id)
    return DeleteResponse(id=result.entity_id, **sync_fields(result.sync))
