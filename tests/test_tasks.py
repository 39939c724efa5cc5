"""
Task tests: validation of assignees and sprints, task actions, filters and
bulk updates.
"""

import uuid


async def create_task(client, ws, principal=None, **fields):
    principal = principal or ws.contributor
    body = {"title": "Task"} | fields
    resp = await client.post(ws.product_url("tasks"), json=body, headers=principal.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_sprint(client, ws, product_url=None, name="Sprint 1"):
    url = product_url or ws.product_url("sprints")
    resp = await client.post(url, json={"name": name}, headers=ws.pm.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Create / validate
# ---------------------------------------------------------------------------

async def test_create_defaults(client, ws):
    task = await create_task(client, ws)
    assert task["status"] == "new"
    assert task["type"] == "task"
    assert task["priority"] == "medium"
    assert task["time_spent"] == 0
    assert task["sprint_id"] is None
    assert task["created_by"] == ws.contributor.user_id


async def test_assignee_must_be_member(client, ws):
    ok = await create_task(client, ws, assignee_id=ws.stakeholder.user_id)
    assert ok["assignee_id"] == ws.stakeholder.user_id

    resp = await client.post(
        ws.product_url("tasks"),
        json={"title": "Nope", "assignee_id": ws.outsider.user_id},
        headers=ws.contributor.headers,
    )
    assert resp.status_code == 422
    assert resp.json()["detail"] == {
        "code": "INVALID_ASSIGNEE",
        "message": "Assignee must be a member of the organization",
        "field": "assignee_id",
    }


async def test_sprint_must_belong_to_product(client, api, ws):
    other = await api.create_product(ws.slug, ws.pm)
    sprint = await create_sprint(
        client, ws, product_url=ws.url(f"products/{other['id']}/sprints")
    )

    for sprint_id in (sprint["id"], str(uuid.uuid4())):
        resp = await client.post(
            ws.product_url("tasks"),
            json={"title": "Wrong sprint", "sprint_id": sprint_id},
            headers=ws.contributor.headers,
        )
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "INVALID_SPRINT"


async def test_cannot_plan_into_closed_sprint(client, ws):
    sprint = await create_sprint(client, ws)
    await client.post(ws.url(f"sprints/{sprint['id']}/cancel"), headers=ws.pm.headers)

    task = await create_task(client, ws)
    resp = await client.put(
        ws.url(f"tasks/{task['id']}/sprint"), json={"sprint_id": sprint["id"]}, headers=ws.contributor.headers
    )

    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "SPRINT_CLOSED"


async def test_effort_bounds(client, ws):
    resp = await client.post(
        ws.product_url("tasks"), json={"title": "Huge", "effort": 101}, headers=ws.contributor.headers
    )
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Task actions
# ---------------------------------------------------------------------------

async def test_set_status_assignee_and_sprint(client, api, ws):
    task = await create_task(client, ws)
    sprint = await create_sprint(client, ws)
    headers = ws.contributor.headers

    status = await client.put(ws.url(f"tasks/{task['id']}/status"), json={"status": "in_review"}, headers=headers)
    assignee = await client.put(
        ws.url(f"tasks/{task['id']}/assignee"), json={"assignee_id": ws.pm.user_id}, headers=headers
    )
    moved = await client.put(ws.url(f"tasks/{task['id']}/sprint"), json={"sprint_id": sprint["id"]}, headers=headers)

    assert status.json()["status"] == "in_review"
    assert assignee.json()["assignee_id"] == ws.pm.user_id
    assert moved.json()["sprint_id"] == sprint["id"]

    backlog = await client.put(ws.url(f"tasks/{task['id']}/sprint"), json={"sprint_id": None}, headers=headers)
    unassigned = await client.put(ws.url(f"tasks/{task['id']}/assignee"), json={"assignee_id": None}, headers=headers)
    assert backlog.json()["sprint_id"] is None
    assert unassigned.json()["assignee_id"] is None

    actions = {e["action"] for e in await api.activity(ws.slug, ws.admin, entity_id=task["id"])}
    assert {"TASK_STATUS_CHANGED", "TASK_ASSIGNED", "TASK_MOVED_TO_SPRINT"} <= actions


async def test_log_time_accumulates(client, ws):
    task = await create_task(client, ws, time_estimate=4)
    url = ws.url(f"tasks/{task['id']}/time")

    await client.post(url, json={"hours": 1.5}, headers=ws.contributor.headers)
    resp = await client.post(url, json={"hours": 2}, headers=ws.contributor.headers)

    assert resp.json()["time_spent"] == 3.5
    assert resp.json()["time_estimate"] == 4


async def test_log_time_rejects_non_positive_hours(client, ws):
    task = await create_task(client, ws)
    resp = await client.post(ws.url(f"tasks/{task['id']}/time"), json={"hours": 0}, headers=ws.contributor.headers)
    assert resp.status_code == 422


async def test_delete_requires_product_manager(client, ws):
    task = await create_task(client, ws)
    denied = await client.delete(ws.url(f"tasks/{task['id']}"), headers=ws.contributor.headers)
    allowed = await client.delete(ws.url(f"tasks/{task['id']}"), headers=ws.pm.headers)
    assert denied.status_code == 403
    assert allowed.status_code == 200


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

async def test_list_filters(client, ws):
    bug = await create_task(client, ws, type="bug", priority="high")
    await create_task(client, ws, status="done")
    mine = await create_task(client, ws, assignee_id=ws.contributor.user_id)
    headers = ws.stakeholder.headers

    by_status = await client.get(ws.product_url("tasks"), params={"status": "done"}, headers=headers)
    by_type = await client.get(ws.product_url("tasks"), params={"type": "bug"}, headers=headers)
    by_assignee = await client.get(
        ws.product_url("tasks"), params={"assignee_id": ws.contributor.user_id}, headers=headers
    )
    everything = await client.get(ws.product_url("tasks"), headers=headers)

    assert [t["status"] for t in by_status.json()["tasks"]] == ["done"]
    assert [t["id"] for t in by_type.json()["tasks"]] == [bug["id"]]
    assert [t["id"] for t in by_assignee.json()["tasks"]] == [mine["id"]]
    assert everything.json()["total"] == 3


async def test_filtered_lists_are_not_cached(client, redis, ws):
    await create_task(client, ws, status="done")
    await client.get(ws.product_url("tasks"), params={"status": "done"}, headers=ws.pm.headers)
    assert not [k for k in redis.store if k.endswith("/tasks")]

    await client.get(ws.product_url("tasks"), headers=ws.pm.headers)
    assert [k for k in redis.store if k.endswith(f"products/{ws.product_id}/tasks")]


# ---------------------------------------------------------------------------
# Bulk update
# ---------------------------------------------------------------------------

async def test_bulk_update(client, api, ws):
    tasks = [await create_task(client, ws, title=f"T{i}") for i in range(3)]
    ids = [t["id"] for t in tasks]

    resp = await client.patch(
        ws.url("tasks/bulk"),
        json={"task_ids": ids + [str(uuid.uuid4())], "status": "done", "priority": "low"},
        headers=ws.pm.headers,
    )

    assert resp.status_code == 200
    assert resp.json() == {"updated": 3}

    listed = await client.get(ws.product_url("tasks"), headers=ws.pm.headers)
    assert {(t["status"], t["priority"]) for t in listed.json()["tasks"]} == {("done", "low")}

    entries = await api.activity(ws.slug, ws.admin, entity_type="TASK", limit=200)
    bulk = [e for e in entries if e["action"] == "TASK_BULK_UPDATED"]
    assert sorted(e["entity_id"] for e in bulk) == sorted(ids)
    assert all(e["metadata"]["batch_size"] == 3 for e in bulk)
    assert all(e["metadata"]["changes"] == {"status": "done", "priority": "low"} for e in bulk)


async def test_bulk_update_skips_other_org_tasks(client, api, ws):
    other_admin = await api.register("other")
    other_slug = await api.create_org(other_admin, name="Other Co")
    other_product = await api.create_product(other_slug, other_admin)
    foreign = await client.post(
        f"/api/v1/organizations/{other_slug}/products/{other_product['id']}/tasks",
        json={"title": "Foreign"},
        headers=other_admin.headers,
    )

    resp = await client.patch(
        ws.url("tasks/bulk"),
        json={"task_ids": [foreign.json()["id"]], "status": "done"},
        headers=ws.pm.headers,
    )

    assert resp.json() == {"updated": 0}
    untouched = await client.get(
        f"/api/v1/organizations/{other_slug}/tasks/{foreign.json()['id']}", headers=other_admin.headers
    )
    assert untouched.json()["status"] == "new"


async def test_bulk_update_validates_assignee(client, ws):
    task = await create_task(client, ws)
    resp = await client.patch(
        ws.url("tasks/bulk"),
        json={"task_ids": [task["id"]], "assignee_id": ws.outsider.user_id},
        headers=ws.pm.headers,
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "INVALID_ASSIGNEE"


async def test_bulk_update_needs_changes(client, ws):
    task = await create_task(client, ws)
    resp = await client.patch(ws.url("tasks/bulk"), json={"task_ids": [task["id"]]}, headers=ws.pm.headers)
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "EMPTY_UPDATE"


async def test_bulk_update_requires_product_manager(client, ws):
    task = await create_task(client, ws)
    resp = await client.patch(
        ws.url("tasks/bulk"), json={"task_ids": [task["id"]], "status": "done"}, headers=ws.contributor.headers
    )
    assert resp.status_code == 403
