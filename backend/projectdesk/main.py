"""
ProjectDesk - Project Management Backend

FastAPI application entry point.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .database import init_db, close_db
from .config import settings
from .api import (
    projects_router,
    todos_router,
    links_router,
    notes_router,
    meetings_router,
    configurations_router,
    layout_router,
    sync_router,
)
from .services import EntityNotFoundError, InvalidLayoutError, PrimaryStoreError, ReadOnlyBlockError
from .tracer import setup_follow_through_logging

# Configure logging based on mode
if settings.debug:
    log_level = logging.DEBUG
elif settings.follow_through:
    log_level = logging.WARNING  # Suppress normal logs, let tracer handle output
else:
    log_level = logging.INFO

logging.basicConfig(
    level=log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Quiet down noisy loggers when not in debug mode
if not settings.debug:
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)

# Setup follow-through tracing
setup_follow_through_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting ProjectDesk...")

    try:
        settings.validate_auth_config()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise

    if settings.mirror_enabled:
        logger.info(f"Mirroring to {settings.mirror_api_url}")
    else:
        logger.warning("MIRROR_API_URL is not set, mutations will not be mirrored")

    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down ProjectDesk...")
    await close_db()


app = FastAPI(
    title="ProjectDesk",
    description="""
    Multi-tenant project management backend.

    ## Features
    - **Projects**: Todos, notes with attachments, links and meetings per project
    - **Configurator**: Per-project BRD and configurator blocks inherited from a master project
    - **Mirroring**: Every project, todo, link, note and configuration change is copied to a secondary service
    - **Sync Debt**: Failed mirror calls are recorded and can be replayed
    """,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EntityNotFoundError)
async def not_found_handler(request: Request, exc: EntityNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ReadOnlyBlockError)
async def read_only_handler(request: Request, exc: ReadOnlyBlockError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(InvalidLayoutError)
async def invalid_layout_handler(request: Request, exc: InvalidLayoutError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(PrimaryStoreError)
async def primary_store_handler(request: Request, exc: PrimaryStoreError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.include_router(projects_router)
app.include_router(todos_router)
app.include_router(links_router)
app.include_router(notes_router)
app.include_router(meetings_router)
app.include_router(configurations_router)
app.include_router(layout_router)
app.include_router(sync_router)

os.makedirs(settings.media_root, exist_ok=True)
app.mount(settings.media_url, StaticFiles(directory=settings.media_root), name="media")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "ProjectDesk",
        "version": "1.0.0",
        "description": "Project management backend",
        "mirror_enabled": settings.mirror_enabled,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
