"""Mirror client wire format and writer failure isolation."""
import json
import logging

import pytest

from projectdesk.auth import Principal
from projectdesk.events import SyncEventType
from projectdesk.mirror import (
    MirrorClient,
    MirrorHTTPError,
    MirrorOp,
    MirrorResource,
    MirrorUnavailableError,
    MirrorWriter,
    NoActiveSessionError,
    SyncStatus,
    delete_body,
    update_body,
)
from projectdesk.mirror.outbox import MirrorOutbox
from projectdesk.models.sync import MirrorOutboxEntry
from sqlalchemy import select
from tests.conftest import MIRROR_URL, make_client, make_writer


class TestMirrorClient:

    @pytest.mark.asyncio
    async def test_create_posts_full_row_with_bearer_token(self, principal, recorder):
        client = make_client(principal, recorder)
        await client.send(MirrorOp.CREATE, MirrorResource.LINKS, {"id": "l1", "title": "Docs"})

        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{MIRROR_URL}/links"
        assert request.headers["Authorization"] == "Bearer token-1"
        assert json.loads(request.content) == {"id": "l1", "title": "Docs"}

    @pytest.mark.asyncio
    async def test_delete_sends_key_in_json_body(self, principal, recorder):
        client = make_client(principal, recorder)
        await client.send(MirrorOp.DELETE, MirrorResource.TODOS, delete_body(MirrorResource.TODOS, "t1"))

        request = recorder.requests[0]
        assert request.method == "DELETE"
        assert json.loads(request.content) == {"id": "t1"}

    def test_configurations_are_keyed_by_project(self):
        body = update_body(MirrorResource.CONFIGURATIONS, "p1", {"brd_content": "x"})
        assert body == {"project_id": "p1", "brd_content": "x"}

    @pytest.mark.asyncio
    async def test_non_2xx_raises_http_error(self, principal, recorder):
        recorder.fail_with(500)
        with pytest.raises(MirrorHTTPError) as exc_info:
            await make_client(principal, recorder).send(MirrorOp.UPDATE, MirrorResource.NOTES, {"id": "n1"})
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_failure_raises_unavailable(self, principal, recorder):
        recorder.go_offline()
        with pytest.raises(MirrorUnavailableError):
            await make_client(principal, recorder).send(MirrorOp.UPDATE, MirrorResource.NOTES, {"id": "n1"})

    @pytest.mark.asyncio
    async def test_missing_session_raises(self, recorder):
        client = make_client(Principal(user_id="u"), recorder)
        with pytest.raises(NoActiveSessionError):
            await client.send(MirrorOp.CREATE, MirrorResource.PROJECTS, {"id": "p"})
        assert recorder.requests == []

    def test_client_without_url_is_disabled(self, principal):
        assert MirrorClient("", principal).enabled is False


class TestMirrorWriter:

    @pytest.mark.asyncio
    async def test_success_is_synced_and_published(self, db, principal, recorder, publisher):
        writer = make_writer(db, principal, recorder, publisher)
        events = publisher.subscribe(principal.user_id)
        await events.__anext__()  # connected

        result = await writer.mirror(
            MirrorOp.CREATE, MirrorResource.TODOS, {"id": "t1"}, user_id=principal.user_id, entity_id="t1"
        )

        assert result.status == SyncStatus.SYNCED
        assert result.error is None
        event = json.loads((await events.__anext__())[len("data: "):])
        assert event["event_type"] == SyncEventType.MIRROR_SYNCED.value
        assert event["entity_id"] == "t1"
        await events.aclose()

    @pytest.mark.asyncio
    async def test_failure_never_raises_and_is_queued(self, db, principal, recorder, caplog):
        recorder.fail_with(503)
        writer = make_writer(db, principal, recorder)

        with caplog.at_level(logging.WARNING, logger="projectdesk.mirror.writer"):
            result = await writer.mirror(
                MirrorOp.UPDATE, MirrorResource.LINKS, {"id": "l1", "title": "New"},
                user_id=principal.user_id, entity_id="l1",
            )

        assert result.status == SyncStatus.QUEUED
        assert "503" in result.error
        assert any("Mirror sync failed" in r.message for r in caplog.records)

        entries = (await db.execute(select(MirrorOutboxEntry))).scalars().all()
        assert len(entries) == 1
        assert entries[0].id == result.outbox_id
        assert json.loads(entries[0].payload) == {"id": "l1", "title": "New"}

    @pytest.mark.asyncio
    async def test_failure_without_outbox_is_failed(self, db, principal, recorder):
        recorder.go_offline()
        writer = make_writer(db, principal, recorder, outbox=False)

        result = await writer.mirror(MirrorOp.DELETE, MirrorResource.TODOS, {"id": "t1"}, user_id=principal.user_id)

        assert result.status == SyncStatus.FAILED
        assert result.in_debt

    @pytest.mark.asyncio
    async def test_disabled_client_is_skipped(self, db, principal, recorder):
        writer = MirrorWriter(MirrorClient("", principal), outbox=MirrorOutbox(db))

        result = await writer.mirror(MirrorOp.CREATE, MirrorResource.PROJECTS, {"id": "p"}, user_id=principal.user_id)

        assert result.status == SyncStatus.SKIPPED
        assert recorder.requests == []


@pytest.mark.asyncio
async def test_close_all_ends_subscriber_streams(publisher, principal):
    events = publisher.subscribe(principal.user_id)
    await events.__anext__()  # connected

    await publisher.close_all(principal.user_id)

    with pytest.raises(StopAsyncIteration):
        await events.__anext__()
    assert await publisher.publish(principal.user_id, SyncEventType.MIRROR_SYNCED, "late", resource="todos") == 0
