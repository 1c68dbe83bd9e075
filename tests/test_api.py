"""HTTP surface: routing, error mapping and bearer authentication."""
import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import select

from projectdesk.api.deps import get_file_storage, get_mirror_client
from projectdesk.auth import Principal, get_principal
from projectdesk.config import settings
from projectdesk.database import get_db
from projectdesk.main import app
from projectdesk.models.profile import Profile
from projectdesk.services import ConfigurationService
from tests.conftest import add_project, make_client, make_writer


@pytest_asyncio.fixture
async def api(db, principal, recorder, storage):
    async def override_db():
        yield db

    def override_client(acting: Principal = Depends(get_principal)):
        return make_client(acting, recorder)

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_principal] = lambda: principal
    app.dependency_overrides[get_mirror_client] = override_client
    app.dependency_overrides[get_file_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health(api):
    response = await api.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_create_project_reports_sync_status(api, recorder):
    response = await api.post("/projects", json={"title": "ERP Rollout"})

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "ERP Rollout"
    assert body["color"] == "#3B82F6"
    assert body["sync_status"] == "synced"
    assert recorder.calls() == [("POST", "/api/projects")]

    listing = (await api.get("/projects")).json()
    assert listing["total"] == 1
    assert listing["projects"][0]["id"] == body["id"]


@pytest.mark.asyncio
async def test_unknown_fields_are_rejected(api):
    response = await api.post("/projects", json={"title": "X", "owner": "someone"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_link_create_with_failing_mirror_is_queued(api, recorder, project):
    recorder.fail_with(500)

    response = await api.post(f"/projects/{project.id}/links", json={"title": "Docs", "url": "https://x.test"})

    assert response.status_code == 200
    assert response.json()["sync_status"] == "queued"

    outbox = (await api.get("/sync/outbox")).json()
    assert [e["resource"] for e in outbox["entries"]] == ["links"]


@pytest.mark.asyncio
async def test_meeting_round_trip(api, recorder, project):
    created = await api.post(f"/projects/{project.id}/meetings", json={
        "title": "Kickoff",
        "meeting_date": "2026-02-02T09:00:00",
    })
    assert created.status_code == 200
    meeting_id = created.json()["id"]

    renamed = await api.patch(f"/meetings/{meeting_id}", json={"title": "Kickoff call", "duration": 30})
    assert renamed.status_code == 200
    assert renamed.json()["title"] == "Kickoff call"
    assert renamed.json()["duration"] == 30

    todo = await api.post(f"/meetings/{meeting_id}/todos", json={"title": "Send minutes"})
    assert todo.status_code == 200
    todo_id = todo.json()["id"]
    toggled = await api.post(f"/meetings/{meeting_id}/todos/{todo_id}/toggle", json={"completed": True})
    assert toggled.json()["completed"] is True

    listing = (await api.get(f"/projects/{project.id}/meetings")).json()
    assert listing["total"] == 1
    assert [t["title"] for t in listing["meetings"][0]["todos"]] == ["Send minutes"]

    deleted = await api.delete(f"/meetings/{meeting_id}")
    assert deleted.json() == {"status": "deleted", "id": meeting_id}
    assert (await api.get(f"/projects/{project.id}/meetings")).json()["total"] == 0
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_unknown_todo_is_404(api):
    response = await api.patch("/todos/missing", json={"title": "x"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_read_only_block_save_is_409(api, db, admin_principal, recorder, storage, project):
    master = await add_project(db, admin_principal.user_id, "Master")
    master_configurator = ConfigurationService(
        db, admin_principal, make_writer(db, admin_principal, recorder), storage
    )
    master_view = await master_configurator.load(master.id)
    await master_configurator.save_blocks(master.id, {master_view.blocks[0].id: "Locked"})

    configuration = (await api.get(f"/projects/{project.id}/configuration")).json()
    locked = configuration["blocks"][0]
    assert locked["is_read_only"] is True

    response = await api.put(
        f"/projects/{project.id}/configuration/blocks",
        json={"blocks": {locked["id"]: "Changed"}},
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_layout_defaults_and_duplicate_ids(api):
    layout = (await api.get("/layout")).json()
    assert len(layout["tiles"]) == 7

    response = await api.put("/layout", json={"tiles": [
        {"id": "productivity", "title": "A"},
        {"id": "productivity", "title": "B"},
    ]})

    assert response.status_code == 422


class TestAuthentication:

    @pytest_asyncio.fixture
    async def anonymous_api(self, db):
        async def override_db():
            yield db

        app.dependency_overrides[get_db] = override_db
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
        app.dependency_overrides.clear()

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, anonymous_api):
        response = await anonymous_api.get("/projects")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_is_401(self, anonymous_api):
        response = await anonymous_api.get("/projects", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_token_creates_profile(self, anonymous_api, db):
        token = jwt.encode(
            {"sub": "user-9", "aud": "authenticated", "email": "cleo@example.com"},
            settings.supabase_jwt_secret,
            algorithm="HS256",
        )

        response = await anonymous_api.get("/projects", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"projects": [], "total": 0}
        profile = (await db.execute(select(Profile).where(Profile.id == "user-9"))).scalar_one()
        assert profile.name == "cleo"
        assert profile.is_admin is False
