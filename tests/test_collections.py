"""Project, todo and link collections: primary write, mirror, in-memory list."""
import json
import logging
from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from projectdesk.mirror import SyncStatus
from projectdesk.models.link import Link
from projectdesk.models.project import ProjectStatus
from projectdesk.models.sync import MirrorOutboxEntry
from projectdesk.models.todo import Todo
from projectdesk.services import (
    EntityNotFoundError,
    LinkCollection,
    PrimaryStoreError,
    ProjectCollection,
    TodoCollection,
)
from tests.conftest import add_project


class TestProjects:

    @pytest.mark.asyncio
    async def test_create_mirrors_full_row(self, db, principal, mirror, recorder):
        projects = ProjectCollection(db, principal, mirror)
        result = await projects.create({"title": "ERP Rollout", "color": "#10B981"})

        assert result.sync.status == SyncStatus.SYNCED
        assert projects.items[0].id == result.entity_id
        assert recorder.calls() == [("POST", "/api/projects")]
        body = json.loads(recorder.requests[0].content)
        assert body["id"] == result.entity_id
        assert body["user_id"] == principal.user_id
        assert body["status"] == "active"
        assert body["category"] == "main"

    @pytest.mark.asyncio
    async def test_load_is_scoped_and_hides_master_from_non_admins(
        self, db, principal, other_principal, admin_principal
    ):
        await add_project(db, principal.user_id, "Mine")
        await add_project(db, principal.user_id, "Master")
        await add_project(db, other_principal.user_id, "Theirs")
        await add_project(db, admin_principal.user_id, "master")

        mine = await ProjectCollection(db, principal).load()
        admin = await ProjectCollection(db, admin_principal).load()

        assert [p.title for p in mine] == ["Mine"]
        assert [p.title for p in admin] == ["master"]

    @pytest.mark.asyncio
    async def test_update_sends_key_and_changed_fields(self, db, principal, mirror, recorder, project):
        projects = ProjectCollection(db, principal, mirror)
        await projects.load()

        result = await projects.update(project.id, {"status": ProjectStatus.HOLD, "due_date": date(2026, 3, 1)})

        assert result.entity.status == "hold"
        assert projects.items[0].status == "hold"
        assert json.loads(recorder.requests[0].content) == {
            "id": project.id,
            "status": "hold",
            "due_date": "2026-03-01",
        }

    @pytest.mark.asyncio
    async def test_update_of_foreign_project_is_not_found(self, db, other_principal, mirror, recorder, project):
        with pytest.raises(EntityNotFoundError):
            await ProjectCollection(db, other_principal, mirror).update(project.id, {"title": "Mine now"})
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_delete_cascades_to_children(self, db, principal, mirror, project):
        db.add(Todo(project_id=project.id, title="Kickoff"))
        await db.commit()

        result = await ProjectCollection(db, principal, mirror).delete(project.id)

        assert result.entity is None
        remaining = (await db.execute(select(Todo))).scalars().all()
        assert remaining == []


class TestTodos:

    @pytest.mark.asyncio
    async def test_create_inserts_at_head_and_copies_end_date(self, db, principal, mirror, project):
        todos = TodoCollection(db, principal, mirror)
        await todos.create(project.id, {"title": "First"})

        result = await todos.create(project.id, {"title": "Second", "end_date": date(2026, 2, 10)})

        assert [t.title for t in todos.items] == ["Second", "First"]
        assert result.entity.due_date == date(2026, 2, 10)
        assert result.entity.completed is False
        assert result.entity.priority == "medium"

    @pytest.mark.asyncio
    async def test_toggle_merges_by_id(self, db, principal, mirror, recorder, project):
        todos = TodoCollection(db, principal, mirror)
        created = await todos.create(project.id, {"title": "Ship it"})

        await todos.toggle(created.entity_id, True)

        assert todos.items[0].completed is True
        assert json.loads(recorder.requests[-1].content) == {"id": created.entity_id, "completed": True}

    @pytest.mark.asyncio
    async def test_list_all_spans_projects(self, db, principal, other_principal, project):
        second = await add_project(db, principal.user_id, "Second")
        foreign = await add_project(db, other_principal.user_id, "Foreign")
        db.add_all([
            Todo(project_id=project.id, title="a"),
            Todo(project_id=second.id, title="b"),
            Todo(project_id=foreign.id, title="c"),
        ])
        await db.commit()

        todos = await TodoCollection(db, principal).list_all()

        assert sorted(t.title for t in todos) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_primary_failure_makes_no_mirror_call(self, db, principal, mirror, recorder, project):
        todos = TodoCollection(db, principal, mirror)

        with pytest.raises(PrimaryStoreError):
            await todos.create(project.id, {"title": None})

        assert recorder.requests == []
        assert todos.items == []

    @pytest.mark.asyncio
    async def test_failed_update_makes_no_mirror_call(self, db, principal, mirror, recorder, project):
        db.add(Todo(id="t1", project_id=project.id, title="Call the vendor"))
        await db.commit()
        todos = TodoCollection(db, principal, mirror)
        await todos.load(project.id)

        with pytest.raises(PrimaryStoreError):
            await todos.update("t1", {"title": None})

        assert recorder.requests == []
        stored = (await db.execute(select(Todo).where(Todo.id == "t1"))).scalar_one()
        assert stored.title == "Call the vendor"

    @pytest.mark.asyncio
    async def test_failed_delete_makes_no_mirror_call(self, db, principal, mirror, recorder, project, monkeypatch):
        db.add(Todo(id="t1", project_id=project.id, title="Call the vendor"))
        await db.commit()
        todos = TodoCollection(db, principal, mirror)
        await todos.load(project.id)

        async def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", failing_commit)

        with pytest.raises(PrimaryStoreError):
            await todos.delete("t1")

        assert recorder.requests == []
        assert [t.id for t in todos.items] == ["t1"]

    @pytest.mark.asyncio
    async def test_delete_with_unreachable_mirror(self, db, principal, mirror, recorder, project, caplog):
        db.add(Todo(id="t1", project_id=project.id, title="Call the vendor"))
        await db.commit()
        todos = TodoCollection(db, principal, mirror)
        await todos.load(project.id)
        recorder.go_offline()

        with caplog.at_level(logging.WARNING, logger="projectdesk.mirror.writer"):
            result = await todos.delete("t1")

        assert "t1" not in [t.id for t in todos.items]
        assert result.sync.status == SyncStatus.QUEUED
        assert any("t1" in r.message for r in caplog.records if r.levelno == logging.WARNING)
        assert (await db.execute(select(Todo).where(Todo.id == "t1"))).scalar_one_or_none() is None
        assert json.loads(recorder.requests[0].content) == {"id": "t1"}


class TestLinks:

    @pytest.mark.asyncio
    async def test_create_while_mirror_returns_500(self, db, principal, mirror, recorder, project):
        recorder.fail_with(500)
        links = LinkCollection(db, principal, mirror)

        result = await links.create(project.id, {"title": "Docs", "url": "https://x.test"})

        assert result.sync.status == SyncStatus.QUEUED
        assert [link.title for link in links.items] == ["Docs"]
        stored = (await db.execute(select(Link))).scalar_one()
        assert stored.url == "https://x.test"

        debt = (await db.execute(select(MirrorOutboxEntry))).scalar_one()
        assert debt.entity_id == result.entity_id
        assert debt.op == "create"
        assert debt.resource == "links"

    @pytest.mark.asyncio
    async def test_create_in_foreign_project_is_not_found(self, db, other_principal, mirror, recorder, project):
        with pytest.raises(EntityNotFoundError):
            await LinkCollection(db, other_principal, mirror).create(
                project.id, {"title": "Docs", "url": "https://x.test"}
            )
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_update_passes_partial_fields_through(self, db, principal, mirror, recorder, project):
        links = LinkCollection(db, principal, mirror)
        created = await links.create(project.id, {"title": "Admin", "url": "https://admin.test"})

        await links.update(created.entity_id, {"username": "ops", "password": "hunter2"})

        assert links.items[0].username == "ops"
        assert json.loads(recorder.requests[-1].content) == {
            "id": created.entity_id,
            "username": "ops",
            "password": "hunter2",
        }
