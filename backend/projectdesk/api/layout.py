"""
Layout API

Endpoints for the user's dashboard layout.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import Principal, get_principal
from ..database import get_db
from ..schemas.layout import LayoutPayload, TileSchema
from ..services.layouts import LayoutStore, LayoutTile, SqlLayoutStore

router = APIRouter(prefix="/layout", tags=["layout"])


def get_layout_store(db: AsyncSession = Depends(get_db)) -> LayoutStore:
    return SqlLayoutStore(db)


def _layout_response(tiles) -> LayoutPayload:
    return LayoutPayload(tiles=[TileSchema.model_validate(tile) for tile in tiles])


@router.get("", response_model=LayoutPayload)
async def get_layout(
    principal: Principal = Depends(get_principal),
    store: LayoutStore = Depends(get_layout_store),
):
    """Get the saved dashboard layout, or the default tiles."""
    return _layout_response(await store.load(principal.user_id))


@router.put("", response_model=LayoutPayload)
async def save_layout(
    data: LayoutPayload,
    principal: Principal = Depends(get_principal),
    store: LayoutStore = Depends(get_layout_store),
):
    """Replace the dashboard layout. Tile ids must be unique."""
    tiles = [LayoutTile(id=t.id, title=t.title, size=t.size) for t in data.tiles]
    return _layout_response(await store.save(principal.user_id, tiles))
