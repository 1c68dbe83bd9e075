"""Meetings and their transcripts, summaries and todos."""
from datetime import datetime

import pytest
from sqlalchemy import select

from projectdesk.mirror import SyncStatus
from projectdesk.models.meeting import Meeting, MeetingStatus
from projectdesk.services import EntityNotFoundError, MeetingChildKind, MeetingCollection


@pytest.fixture
def meetings(db, principal, mirror):
    return MeetingCollection(db, principal, mirror)


async def _meeting(meetings, project, title="Sprint review"):
    result = await meetings.create(project.id, {
        "title": title,
        "meeting_date": datetime(2026, 1, 15, 10, 0),
        "duration": 45,
    })
    return result


@pytest.mark.asyncio
async def test_meetings_are_not_mirrored(meetings, recorder, project):
    result = await _meeting(meetings, project)

    assert result.sync.status == SyncStatus.SKIPPED
    assert recorder.requests == []
    assert result.entity.status == "scheduled"
    assert [m.id for m in meetings.items] == [result.entity_id]


@pytest.mark.asyncio
async def test_child_lifecycle(meetings, project):
    meeting = (await _meeting(meetings, project)).entity

    transcript = await meetings.add_child(meeting.id, MeetingChildKind.TRANSCRIPTS, {
        "content": "We agreed to ship Friday.",
        "speaker": "Ana",
    })
    summary = await meetings.add_child(meeting.id, MeetingChildKind.SUMMARIES, {"content": "Ship Friday"})
    todo = await meetings.add_child(meeting.id, MeetingChildKind.TODOS, {"title": "Prepare release notes"})

    assert [t.id for t in meeting.transcripts] == [transcript.id]
    assert [s.id for s in meeting.summaries] == [summary.id]
    assert todo.completed is False

    toggled = await meetings.toggle_todo(meeting.id, todo.id, True)
    assert toggled.completed is True

    await meetings.update_child(meeting.id, MeetingChildKind.SUMMARIES, summary.id, {"decisions": "Ship"})
    assert meeting.summaries[0].decisions == "Ship"

    await meetings.delete_child(meeting.id, MeetingChildKind.TRANSCRIPTS, transcript.id)
    assert meeting.transcripts == []


@pytest.mark.asyncio
async def test_unknown_child_is_not_found(meetings, project):
    meeting = (await _meeting(meetings, project)).entity

    with pytest.raises(EntityNotFoundError):
        await meetings.toggle_todo(meeting.id, "missing", True)


@pytest.mark.asyncio
async def test_load_orders_by_meeting_date(meetings, project):
    await meetings.create(project.id, {"title": "Kickoff", "meeting_date": datetime(2026, 1, 1, 9, 0)})
    await meetings.create(project.id, {"title": "Go-live", "meeting_date": datetime(2026, 3, 1, 9, 0)})

    loaded = await meetings.load(project.id)

    assert [m.title for m in loaded] == ["Go-live", "Kickoff"]


@pytest.mark.asyncio
async def test_update_merges_into_items(meetings, recorder, project):
    meeting = (await _meeting(meetings, project)).entity

    result = await meetings.update(meeting.id, {"title": "Retro", "status": MeetingStatus.COMPLETED})

    assert result.sync.status == SyncStatus.SKIPPED
    assert meetings.items[0].title == "Retro"
    assert meetings.items[0].status == "completed"
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_delete_removes_meeting_and_children(db, meetings, recorder, project):
    meeting = (await _meeting(meetings, project)).entity
    await meetings.add_child(meeting.id, MeetingChildKind.TODOS, {"title": "Follow up"})

    result = await meetings.delete(meeting.id)

    assert result.sync.status == SyncStatus.SKIPPED
    assert meetings.items == []
    assert (await db.execute(select(Meeting))).scalars().all() == []
    assert recorder.requests == []
