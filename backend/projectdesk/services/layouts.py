"""
Dashboard Layout

Per-user dashboard tile order and sizes, behind an explicit load/save
port. Users who never saved a layout get the default tiles.
"""
import json
import logging
from dataclasses import asdict, dataclass
from typing import List, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.profile import DashboardLayout
from .base import PrimaryStoreError

logger = logging.getLogger(__name__)

TILE_SIZES = ("small", "medium", "large")


@dataclass(frozen=True)
class LayoutTile:
    id: str
    title: str
    size: str = "small"


DEFAULT_TILES = [
    LayoutTile("highPriority", "High Priority Actions", "small"),
    LayoutTile("projectPerformance", "Project Performance", "medium"),
    LayoutTile("weeklySummary", "Weekly Summary", "small"),
    LayoutTile("recentActivity", "Recent Activity", "small"),
    LayoutTile("productivity", "Productivity Score", "small"),
    LayoutTile("quickActions", "Quick Actions", "small"),
    LayoutTile("projectStatus", "Project Status", "small"),
]


class InvalidLayoutError(ValueError):
    """A layout failed validation."""
    pass


def validate_tiles(tiles: Sequence[LayoutTile]) -> None:
    seen = set()
    for tile in tiles:
        if tile.id in seen:
            raise InvalidLayoutError(f"Duplicate tile id: {tile.id}")
        if tile.size not in TILE_SIZES:
            raise InvalidLayoutError(f"Invalid size for tile {tile.id}: {tile.size}")
        seen.add(tile.id)


class LayoutStore(Protocol):
    """Persistence port for dashboard layouts."""

    async def load(self, user_id: str) -> List[LayoutTile]:
        ...

    async def save(self, user_id: str, tiles: Sequence[LayoutTile]) -> List[LayoutTile]:
        ...


class SqlLayoutStore:
    """LayoutStore backed by the dashboard_layouts table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load(self, user_id: str) -> List[LayoutTile]:
        result = await self.db.execute(
            select(DashboardLayout).where(DashboardLayout.user_id == user_id)
        )
        layout = result.scalar_one_or_none()
        if layout is None:
            return list(DEFAULT_TILES)

        try:
            return [LayoutTile(**tile) for tile in json.loads(layout.tiles)]
        except (ValueError, TypeError) as e:
            logger.warning(f"Unreadable dashboard layout for {user_id}, using defaults: {e}")
            return list(DEFAULT_TILES)

    async def save(self, user_id: str, tiles: Sequence[LayoutTile]) -> List[LayoutTile]:
        validate_tiles(tiles)
        encoded = json.dumps([asdict(tile) for tile in tiles])

        result = await self.db.execute(
            select(DashboardLayout).where(DashboardLayout.user_id == user_id)
        )
        layout = result.scalar_one_or_none()
        if layout is None:
            self.db.add(DashboardLayout(user_id=user_id, tiles=encoded))
        else:
            layout.tiles = encoded

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error saving dashboard layout for {user_id}: {e}")
            raise PrimaryStoreError("Failed to save dashboard layout") from e

        return list(tiles)
