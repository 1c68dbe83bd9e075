"""
Shared fixtures: an in-memory primary store per test, an acting user,
and a recording stand-in for the mirror service.
"""
import os
import tempfile

os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="projectdesk-media-"))
os.environ.setdefault("MIRROR_API_URL", "")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from projectdesk import models  # noqa: F401  registers tables
from projectdesk.auth import Principal
from projectdesk.database import Base, configure_sqlite
from projectdesk.events import EventPublisher
from projectdesk.mirror import MirrorClient, MirrorOutbox, MirrorWriter
from projectdesk.models.project import Project
from projectdesk.services.storage import LocalFileStorage

MIRROR_URL = "https://mirror.test/api"


class MirrorRecorder:
    """Mock mirror service that records every request it receives."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.error = None

    def fail_with(self, status_code: int) -> None:
        self.status_code = status_code

    def go_offline(self) -> None:
        self.error = "offline"

    def recover(self) -> None:
        self.status_code = 200
        self.error = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error:
            raise httpx.ConnectError("mirror unreachable", request=request)
        return httpx.Response(self.status_code, json={"success": self.status_code < 400})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self):
        """(method, path) of every recorded request."""
        return [(r.method, r.url.path) for r in self.requests]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine.sync_engine, "connect", configure_sqlite)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def principal():
    return Principal(user_id="user-1", access_token="token-1", email="ana@example.com", name="ana")


@pytest.fixture
def other_principal():
    return Principal(user_id="user-2", access_token="token-2", email="ben@example.com", name="ben")


@pytest.fixture
def admin_principal():
    return Principal(user_id="admin-1", access_token="token-admin", name="admin", is_admin=True)


@pytest.fixture
def recorder():
    return MirrorRecorder()


@pytest.fixture
def publisher():
    return EventPublisher()


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(root=str(tmp_path / "media"), base_url="/media")


def make_client(session, recorder: MirrorRecorder) -> MirrorClient:
    return MirrorClient(MIRROR_URL, session, timeout=5.0, transport=recorder.transport)


def make_writer(db, session, recorder, publisher=None, outbox=True) -> MirrorWriter:
    return MirrorWriter(
        make_client(session, recorder),
        outbox=MirrorOutbox(db, publisher) if outbox else None,
        publisher=publisher,
    )


@pytest.fixture
def mirror(db, principal, recorder, publisher):
    return make_writer(db, principal, recorder, publisher)


async def add_project(db, user_id: str, title: str = "Website Relaunch") -> Project:
    project = Project(user_id=user_id, title=title, todos=[], notes=[], links=[], meetings=[])
    db.add(project)
    await db.commit()
    return project


@pytest_asyncio.fixture
async def project(db, principal):
    return await add_project(db, principal.user_id)
