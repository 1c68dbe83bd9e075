"""
Projects API

Endpoints for project management.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import Principal, get_principal
from ..database import get_db
from ..mirror import MirrorWriter
from ..models.project import Project
from ..schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectDetailResponse,
    ProjectListResponse,
)
from ..schemas.sync import DeleteResponse, sync_fields, with_sync
from ..services.projects import ProjectCollection
from .deps import get_mirror_writer

router = APIRouter(prefix="/projects", tags=["projects"])


def _project_to_response(project: Project, sync=None) -> ProjectResponse:
    """Convert Project model to response schema."""
    return with_sync(ProjectResponse.model_validate(project), sync)


@router.post("", response_model=ProjectResponse)
async def create_project(
    data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
):
    """Create a new project."""
    projects = ProjectCollection(db, principal, mirror)
    result = await projects.create(data.model_dump())
    return _project_to_response(result.entity, result.sync)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """List projects with their todos, notes, links and meetings."""
    projects = ProjectCollection(db, principal)
    items = await projects.load()

    return ProjectListResponse(
        projects=[ProjectDetailResponse.model_validate(p) for p in items],
        total=len(items),
    )


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Get a project by ID."""
    project = await ProjectCollection(db, principal).get(project_id)
    return ProjectDetailResponse.model_validate(project)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
):
    """Update a project. Only the fields sent are changed."""
    projects = ProjectCollection(db, principal, mirror)
    result = await projects.update(project_id, data.model_dump(exclude_unset=True))
    return _project_to_response(result.entity, result.sync)


@router.delete("/{project_id}", response_model=DeleteResponse)
async def delete_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
    mirror: MirrorWriter = Depends(get_mirror_writer),
):
    """Delete a project and everything in it."""
    projects = ProjectCollection(db, principal, mirror)
    result = await projects.delete(project_id)
    return DeleteResponse(id=result.entity_id, **sync_fields(result.sync))
