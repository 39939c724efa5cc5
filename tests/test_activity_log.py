"""
Audit trail tests.

Every successful mutation appends exactly one entry in the same transaction;
failed mutations append nothing and entries can never be changed.
"""

import uuid

import pytest

from prodmatic.core.errors import StorageError
from prodmatic.models.activity_log import ActivityLog, ImmutableActivityError
from prodmatic.services.activity_service import ActivityRecorder


async def test_each_mutation_appends_one_entry(client, api, ws):
    task = await client.post(
        ws.product_url("tasks"), json={"title": "Ship it"}, headers=ws.contributor.headers
    )
    task_id = task.json()["id"]

    await client.patch(
        ws.url(f"tasks/{task_id}"), json={"title": "Ship it now"}, headers=ws.contributor.headers
    )
    await client.put(
        ws.url(f"tasks/{task_id}/status"), json={"status": "in_progress"}, headers=ws.contributor.headers
    )
    await client.post(ws.url(f"tasks/{task_id}/time"), json={"hours": 1.5}, headers=ws.contributor.headers)
    await client.delete(ws.url(f"tasks/{task_id}"), headers=ws.pm.headers)

    entries = await api.activity(ws.slug, ws.admin, entity_id=task_id)
    actions = sorted(e["action"] for e in entries)
    assert actions == sorted(
        ["TASK_CREATED", "TASK_UPDATED", "TASK_STATUS_CHANGED", "TASK_TIME_LOGGED", "TASK_DELETED"]
    )
    assert all(e["entity_type"] == "TASK" for e in entries)


async def test_update_entry_carries_field_diff(client, api, ws):
    task = await client.post(
        ws.product_url("tasks"), json={"title": "Old title"}, headers=ws.contributor.headers
    )
    task_id = task.json()["id"]
    await client.patch(
        ws.url(f"tasks/{task_id}"), json={"title": "New title"}, headers=ws.contributor.headers
    )

    entries = await api.activity(ws.slug, ws.admin, entity_id=task_id, entity_type="task")
    updated = next(e for e in entries if e["action"] == "TASK_UPDATED")
    assert updated["metadata"]["changes"]["title"] == {"old": "Old title", "new": "New title"}


async def test_status_entry_carries_old_and_new(client, api, ws):
    idea = await client.post(
        ws.product_url("ideas"), json={"title": "Offline mode"}, headers=ws.contributor.headers
    )
    idea_id = idea.json()["id"]
    await client.put(ws.url(f"ideas/{idea_id}/status"), json={"status": "reviewing"}, headers=ws.pm.headers)

    entries = await api.activity(ws.slug, ws.admin, entity_id=idea_id)
    changed = next(e for e in entries if e["action"] == "IDEA_STATUS_CHANGED")
    assert changed["metadata"]["from"] == "submitted"
    assert changed["metadata"]["to"] == "reviewing"


async def test_validation_failure_appends_nothing(client, api, ws):
    before = await api.activity(ws.slug, ws.admin)

    bad_shape = await client.post(ws.product_url("tasks"), json={"title": ""}, headers=ws.pm.headers)
    bad_assignee = await client.post(
        ws.product_url("tasks"),
        json={"title": "Valid", "assignee_id": ws.outsider.user_id},
        headers=ws.pm.headers,
    )

    assert bad_shape.status_code == 422
    assert bad_assignee.status_code == 422
    assert bad_assignee.json()["detail"]["code"] == "INVALID_ASSIGNEE"
    assert len(await api.activity(ws.slug, ws.admin)) == len(before)


async def test_authorization_failure_appends_nothing(client, api, ws):
    before = await api.activity(ws.slug, ws.admin)

    resp = await client.post(
        ws.url("products"), json={"name": "Nope", "key": "NOPE"}, headers=ws.contributor.headers
    )

    assert resp.status_code == 403
    assert len(await api.activity(ws.slug, ws.admin)) == len(before)


async def test_failed_audit_write_rolls_back_mutation(client, ws, monkeypatch):
    async def failing_log_activity(self, **kwargs):
        raise StorageError("Could not record activity")

    with monkeypatch.context() as patch:
        patch.setattr(ActivityRecorder, "log_activity", failing_log_activity)
        resp = await client.post(
            ws.url("products"), json={"name": "Ghost", "key": "GHOST"}, headers=ws.pm.headers
        )

    assert resp.status_code == 503
    assert resp.json()["detail"]["code"] == "STORAGE_ERROR"
    products = await client.get(ws.url("products"), headers=ws.pm.headers)
    assert "GHOST" not in [p["key"] for p in products.json()["products"]]


async def test_feed_filters(client, api, ws):
    task = await client.post(ws.product_url("tasks"), json={"title": "A"}, headers=ws.contributor.headers)
    await client.post(ws.product_url("ideas"), json={"title": "B"}, headers=ws.pm.headers)

    tasks_only = await api.activity(ws.slug, ws.stakeholder, entity_type="TASK")
    assert [e["entity_id"] for e in tasks_only] == [task.json()["id"]]

    by_actor = await api.activity(ws.slug, ws.stakeholder, actor_id=ws.contributor.user_id)
    assert {e["actor_id"] for e in by_actor} == {ws.contributor.user_id}


async def test_feed_is_scoped_to_organization(client, api, ws):
    other_admin = await api.register("other")
    other_slug = await api.create_org(other_admin, name="Other Co")

    entries = await api.activity(other_slug, other_admin)

    assert [e["action"] for e in entries] == ["ORGANIZATION_CREATED"]


async def test_entries_are_append_only(db_manager):
    entry_id = None
    async with db_manager.session() as session:
        entry = ActivityLog(
            org_id=uuid.uuid4(),
            actor_id=uuid.uuid4(),
            action="TASK_CREATED",
            entity_type="TASK",
            entity_id=uuid.uuid4(),
            metadata_={"title": "x"},
        )
        session.add(entry)
        await session.commit()
        entry_id = entry.id

        entry.action = "TASK_DELETED"
        with pytest.raises(ImmutableActivityError):
            await session.flush()

    async with db_manager.session() as session:
        entry = await session.get(ActivityLog, entry_id)
        assert entry.action == "TASK_CREATED"
        await session.delete(entry)
        with pytest.raises(ImmutableActivityError):
            await session.flush()
