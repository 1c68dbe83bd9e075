"""Dashboard layout store."""
import pytest

from projectdesk.models.profile import DashboardLayout
from projectdesk.services.layouts import (
    DEFAULT_TILES,
    InvalidLayoutError,
    LayoutTile,
    SqlLayoutStore,
)


@pytest.mark.asyncio
async def test_new_user_gets_default_tiles(db):
    tiles = await SqlLayoutStore(db).load("user-1")

    assert [t.id for t in tiles] == [
        "highPriority",
        "projectPerformance",
        "weeklySummary",
        "recentActivity",
        "productivity",
        "quickActions",
        "projectStatus",
    ]
    assert tiles[1].size == "medium"


@pytest.mark.asyncio
async def test_saved_layout_is_loaded_per_user(db):
    store = SqlLayoutStore(db)
    tiles = [LayoutTile("projectStatus", "Project Status", "large"), LayoutTile("quickActions", "Quick Actions")]

    await store.save("user-1", tiles)
    await store.save("user-1", list(reversed(tiles)))

    assert [t.id for t in await store.load("user-1")] == ["quickActions", "projectStatus"]
    assert await store.load("user-2") == DEFAULT_TILES


@pytest.mark.asyncio
async def test_duplicate_tile_ids_are_rejected(db):
    store = SqlLayoutStore(db)
    tiles = [LayoutTile("productivity", "A"), LayoutTile("productivity", "B")]

    with pytest.raises(InvalidLayoutError):
        await store.save("user-1", tiles)

    assert await store.load("user-1") == DEFAULT_TILES


@pytest.mark.asyncio
async def test_unreadable_layout_falls_back_to_defaults(db):
    db.add(DashboardLayout(user_id="user-1", tiles="not json"))
    await db.commit()

    assert await SqlLayoutStore(db).load("user-1") == DEFAULT_TILES
