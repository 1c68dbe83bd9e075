# API Routes
from .projects import router as projects_router
from .todos import router as todos_router
from .links import router as links_router
from .notes import router as notes_router
from .meetings import router as meetings_router
from .configurations import router as configurations_router
from .layout import router as layout_router
from .sync import router as sync_router

__all__ = [
    "projects_router",
    "todos_router",
    "links_router",
    "notes_router",
    "meetings_router",
    "configurations_router",
    "layout_router",
    "sync_router",
]
