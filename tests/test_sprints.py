"""
Sprint lifecycle, scope and board tests.
"""

import uuid


async def create_sprint(client, ws, **fields):
    body = {"name": "Sprint"} | fields
    resp = await client.post(ws.product_url("sprints"), json=body, headers=ws.pm.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_task(client, ws, **fields):
    body = {"title": "Task"} | fields
    resp = await client.post(ws.product_url("tasks"), json=body, headers=ws.contributor.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def add_tasks(client, ws, sprint_id, task_ids, principal=None):
    principal = principal or ws.contributor
    return await client.post(
        ws.url(f"sprints/{sprint_id}/tasks"), json={"task_ids": task_ids}, headers=principal.headers
    )


async def started_sprint(client, ws, *tasks):
    sprint = await create_sprint(client, ws)
    resp = await add_tasks(client, ws, sprint["id"], [t["id"] for t in tasks])
    assert resp.status_code == 200, resp.text
    resp = await client.post(ws.url(f"sprints/{sprint['id']}/start"), headers=ws.pm.headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

async def test_end_date_before_start_rejected(client, ws):
    resp = await client.post(
        ws.product_url("sprints"),
        json={"name": "Backwards", "start_date": "2026-03-10", "end_date": "2026-03-01"},
        headers=ws.pm.headers,
    )
    assert resp.status_code == 422


async def test_update_keeps_dates_ordered(client, ws):
    sprint = await create_sprint(client, ws, start_date="2026-03-01", end_date="2026-03-14")
    resp = await client.patch(
        ws.url(f"sprints/{sprint['id']}"), json={"end_date": "2026-02-20"}, headers=ws.pm.headers
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["field"] == "end_date"


# ---------------------------------------------------------------------------
# Start
# ---------------------------------------------------------------------------

async def test_start_requires_tasks(client, ws):
    sprint = await create_sprint(client, ws)
    resp = await client.post(ws.url(f"sprints/{sprint['id']}/start"), headers=ws.pm.headers)
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "EMPTY_SPRINT"


async def test_start_sets_active(client, api, ws):
    task = await create_task(client, ws)
    sprint = await started_sprint(client, ws, task)

    assert sprint["status"] == "active"
    assert sprint["started_at"] is not None
    actions = {e["action"] for e in await api.activity(ws.slug, ws.admin, entity_id=sprint["id"])}
    assert {"SPRINT_CREATED", "SPRINT_TASKS_ADDED", "SPRINT_STARTED"} <= actions


async def test_only_one_active_sprint_per_product(client, ws):
    await started_sprint(client, ws, await create_task(client, ws))
    second = await create_sprint(client, ws, name="Next")
    await add_tasks(client, ws, second["id"], [(await create_task(client, ws))["id"]])

    resp = await client.post(ws.url(f"sprints/{second['id']}/start"), headers=ws.pm.headers)

    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "ACTIVE_SPRINT_EXISTS"


async def test_start_only_from_planned(client, ws):
    sprint = await started_sprint(client, ws, await create_task(client, ws))
    resp = await client.post(ws.url(f"sprints/{sprint['id']}/start"), headers=ws.pm.headers)
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "INVALID_STATUS"


async def test_contributor_cannot_start(client, ws):
    sprint = await create_sprint(client, ws)
    await add_tasks(client, ws, sprint["id"], [(await create_task(client, ws))["id"]])
    resp = await client.post(ws.url(f"sprints/{sprint['id']}/start"), headers=ws.contributor.headers)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Complete / cancel
# ---------------------------------------------------------------------------

async def test_complete_records_velocity_and_keeps_tasks(client, ws):
    done_a = await create_task(client, ws, effort=3, status="done")
    done_b = await create_task(client, ws, effort=5, status="done")
    open_task = await create_task(client, ws, effort=8)
    sprint = await started_sprint(client, ws, done_a, done_b, open_task)

    resp = await client.post(
        ws.url(f"sprints/{sprint['id']}/complete"), json={}, headers=ws.pm.headers
    )

    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"
    assert resp.json()["velocity"] == 8
    assert resp.json()["completed_at"] is not None
    kept = await client.get(ws.url(f"tasks/{open_task['id']}"), headers=ws.pm.headers)
    assert kept.json()["sprint_id"] == sprint["id"]


async def test_complete_moves_incomplete_tasks_to_backlog(client, api, ws):
    done = await create_task(client, ws, effort=2, status="done")
    open_task = await create_task(client, ws, effort=8)
    sprint = await started_sprint(client, ws, done, open_task)

    resp = await client.post(
        ws.url(f"sprints/{sprint['id']}/complete"),
        json={"incomplete_task_action": "move_to_backlog"},
        headers=ws.pm.headers,
    )

    assert resp.json()["velocity"] == 2
    moved = await client.get(ws.url(f"tasks/{open_task['id']}"), headers=ws.pm.headers)
    stayed = await client.get(ws.url(f"tasks/{done['id']}"), headers=ws.pm.headers)
    assert moved.json()["sprint_id"] is None
    assert stayed.json()["sprint_id"] == sprint["id"]

    entries = await api.activity(ws.slug, ws.admin, entity_id=sprint["id"])
    completed = next(e for e in entries if e["action"] == "SPRINT_COMPLETED")
    assert completed["metadata"]["moved_to_backlog"] == [open_task["id"]]


async def test_complete_only_from_active(client, ws):
    sprint = await create_sprint(client, ws)
    resp = await client.post(ws.url(f"sprints/{sprint['id']}/complete"), json={}, headers=ws.pm.headers)
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "INVALID_STATUS"


async def test_cancel(client, ws):
    sprint = await create_sprint(client, ws)
    cancelled = await client.post(ws.url(f"sprints/{sprint['id']}/cancel"), headers=ws.pm.headers)
    again = await client.post(ws.url(f"sprints/{sprint['id']}/cancel"), headers=ws.pm.headers)

    assert cancelled.json()["status"] == "cancelled"
    assert again.status_code == 422


# ---------------------------------------------------------------------------
# Scope
# ---------------------------------------------------------------------------

async def test_add_tasks_rejects_unknown_or_foreign_tasks(client, api, ws):
    sprint = await create_sprint(client, ws)
    other = await api.create_product(ws.slug, ws.pm)
    foreign = await client.post(
        ws.url(f"products/{other['id']}/tasks"), json={"title": "Elsewhere"}, headers=ws.pm.headers
    )

    for task_id in (foreign.json()["id"], str(uuid.uuid4())):
        resp = await add_tasks(client, ws, sprint["id"], [task_id])
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "INVALID_TASKS"


async def test_cannot_add_to_closed_sprint(client, ws):
    sprint = await started_sprint(client, ws, await create_task(client, ws))
    await client.post(ws.url(f"sprints/{sprint['id']}/complete"), json={}, headers=ws.pm.headers)

    resp = await add_tasks(client, ws, sprint["id"], [(await create_task(client, ws))["id"]])

    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "SPRINT_CLOSED"


async def test_remove_task(client, ws):
    task = await create_task(client, ws)
    sprint = await create_sprint(client, ws)
    await add_tasks(client, ws, sprint["id"], [task["id"]])

    removed = await client.delete(
        ws.url(f"sprints/{sprint['id']}/tasks/{task['id']}"), headers=ws.contributor.headers
    )
    missing = await client.delete(
        ws.url(f"sprints/{sprint['id']}/tasks/{task['id']}"), headers=ws.contributor.headers
    )

    assert removed.status_code == 200
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "TASK_NOT_FOUND"
    backlog = await client.get(ws.url(f"tasks/{task['id']}"), headers=ws.pm.headers)
    assert backlog.json()["sprint_id"] is None


async def test_cannot_remove_from_completed_sprint(client, ws):
    task = await create_task(client, ws)
    sprint = await started_sprint(client, ws, task)
    await client.post(ws.url(f"sprints/{sprint['id']}/complete"), json={}, headers=ws.pm.headers)

    resp = await client.delete(ws.url(f"sprints/{sprint['id']}/tasks/{task['id']}"), headers=ws.pm.headers)

    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "SPRINT_CLOSED"


async def test_delete_sprint_returns_tasks_to_backlog(client, ws):
    task = await create_task(client, ws)
    sprint = await create_sprint(client, ws)
    await add_tasks(client, ws, sprint["id"], [task["id"]])

    resp = await client.delete(ws.url(f"sprints/{sprint['id']}"), headers=ws.pm.headers)

    assert resp.status_code == 200
    backlog = await client.get(ws.url(f"tasks/{task['id']}"), headers=ws.pm.headers)
    assert backlog.json()["sprint_id"] is None


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------

async def test_board_groups_tasks_by_status(client, ws):
    tasks = [
        await create_task(client, ws, effort=1),
        await create_task(client, ws, effort=2, status="in_progress"),
        await create_task(client, ws, effort=3, status="done"),
        await create_task(client, ws, effort=4, status="done"),
    ]
    sprint = await create_sprint(client, ws)
    await add_tasks(client, ws, sprint["id"], [t["id"] for t in tasks])

    resp = await client.get(ws.url(f"sprints/{sprint['id']}/board"), headers=ws.stakeholder.headers)

    board = resp.json()
    assert [c["status"] for c in board["columns"]] == ["new", "in_progress", "in_review", "done", "cancelled"]
    assert [c["count"] for c in board["columns"]] == [1, 1, 0, 2, 0]
    assert [c["effort"] for c in board["columns"]] == [1, 2, 0, 7, 0]
    assert board["total_effort"] == 10
    assert board["completed_effort"] == 7
    assert board["sprint"]["id"] == sprint["id"]


async def test_board_refreshes_after_task_change(client, redis, ws):
    task = await create_task(client, ws, effort=5)
    sprint = await create_sprint(client, ws)
    await add_tasks(client, ws, sprint["id"], [task["id"]])
    url = ws.url(f"sprints/{sprint['id']}/board")

    first = await client.get(url, headers=ws.pm.headers)
    assert first.json()["completed_effort"] == 0
    assert any(k.endswith(f"sprints/{sprint['id']}/board") for k in redis.store)

    await client.put(ws.url(f"tasks/{task['id']}/status"), json={"status": "done"}, headers=ws.contributor.headers)

    second = await client.get(url, headers=ws.pm.headers)
    assert second.json()["completed_effort"] == 5
