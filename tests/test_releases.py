"""
Release, launch checklist and changelog tests.
"""

import pytest

from prodmatic.models.release import ChecklistCategory
from prodmatic.services.checklist_templates import TEMPLATES


async def create_release(client, ws, **fields):
    body = {"name": "Spring launch", "version": "2.0.0"} | fields
    resp = await client.post(ws.product_url("releases"), json=body, headers=ws.pm.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_item(client, ws, release_id, principal=None, **fields):
    principal = principal or ws.contributor
    body = {"title": "Smoke test"} | fields
    resp = await client.post(
        ws.url(f"releases/{release_id}/checklist"), json=body, headers=principal.headers
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Releases
# ---------------------------------------------------------------------------

async def test_create_defaults(client, ws):
    release = await create_release(client, ws)
    assert release["status"] == "planned"
    assert release["type"] == "minor"
    assert release["release_date"] is None


async def test_contributor_cannot_manage_releases(client, ws):
    resp = await client.post(
        ws.product_url("releases"), json={"name": "R", "version": "1"}, headers=ws.contributor.headers
    )
    assert resp.status_code == 403


async def test_deploy(client, api, ws):
    release = await create_release(client, ws)

    resp = await client.post(ws.url(f"releases/{release['id']}/deploy"), headers=ws.pm.headers)

    assert resp.status_code == 200
    assert resp.json()["status"] == "released"
    assert resp.json()["release_date"] is not None
    again = await client.post(ws.url(f"releases/{release['id']}/deploy"), headers=ws.pm.headers)
    assert again.status_code == 422
    assert again.json()["detail"]["code"] == "INVALID_STATUS"

    actions = {e["action"] for e in await api.activity(ws.slug, ws.admin, entity_id=release["id"])}
    assert "RELEASE_DEPLOYED" in actions


async def test_set_status_released_stamps_date(client, ws):
    release = await create_release(client, ws)
    url = ws.url(f"releases/{release['id']}/status")

    in_progress = await client.put(url, json={"status": "in_progress"}, headers=ws.pm.headers)
    released = await client.put(url, json={"status": "released"}, headers=ws.pm.headers)

    assert in_progress.json()["release_date"] is None
    assert released.json()["status"] == "released"
    assert released.json()["release_date"] is not None


async def test_setting_released_again_keeps_ship_date(client, ws):
    release = await create_release(client, ws)
    url = ws.url(f"releases/{release['id']}/status")

    first = await client.put(url, json={"status": "released"}, headers=ws.pm.headers)
    again = await client.put(url, json={"status": "released"}, headers=ws.pm.headers)

    assert again.status_code == 200
    assert again.json()["release_date"] == first.json()["release_date"]


async def test_delete_release_removes_checklist(client, ws):
    release = await create_release(client, ws)
    item = await create_item(client, ws, release["id"])

    await client.delete(ws.url(f"releases/{release['id']}"), headers=ws.pm.headers)

    resp = await client.post(ws.url(f"checklist/{item['id']}/toggle"), headers=ws.pm.headers)
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "CHECKLIST_ITEM_NOT_FOUND"


# ---------------------------------------------------------------------------
# Checklist items
# ---------------------------------------------------------------------------

async def test_toggle_maintains_completed_at(client, ws):
    release = await create_release(client, ws)
    item = await create_item(client, ws, release["id"], is_required=True)
    url = ws.url(f"checklist/{item['id']}/toggle")

    done = await client.post(url, headers=ws.contributor.headers)
    undone = await client.post(url, headers=ws.contributor.headers)

    assert done.json()["is_completed"] is True
    assert done.json()["completed_at"] is not None
    assert undone.json()["is_completed"] is False
    assert undone.json()["completed_at"] is None


async def test_item_assignee_must_be_member(client, ws):
    release = await create_release(client, ws)
    resp = await client.post(
        ws.url(f"releases/{release['id']}/checklist"),
        json={"title": "Sign-off", "assignee_id": ws.outsider.user_id},
        headers=ws.contributor.headers,
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "INVALID_ASSIGNEE"


async def test_item_update_and_delete_roles(client, ws):
    release = await create_release(client, ws)
    item = await create_item(client, ws, release["id"])

    updated = await client.patch(
        ws.url(f"checklist/{item['id']}"), json={"category": "testing"}, headers=ws.contributor.headers
    )
    denied = await client.delete(ws.url(f"checklist/{item['id']}"), headers=ws.contributor.headers)
    deleted = await client.delete(ws.url(f"checklist/{item['id']}"), headers=ws.pm.headers)

    assert updated.json()["category"] == "testing"
    assert denied.status_code == 403
    assert deleted.status_code == 200


# ---------------------------------------------------------------------------
# Templates and readiness
# ---------------------------------------------------------------------------

def test_template_sizes():
    assert {name: len(items) for name, items in TEMPLATES.items()} == {
        "basic": 8,
        "comprehensive": 19,
        "enterprise": 31,
    }
    for items in TEMPLATES.values():
        assert all(isinstance(category, ChecklistCategory) for _, category, _ in items)


@pytest.mark.parametrize("template,size", [("basic", 8), ("comprehensive", 19), ("enterprise", 31)])
async def test_apply_template(client, api, ws, template, size):
    release = await create_release(client, ws)

    resp = await client.post(
        ws.url(f"releases/{release['id']}/checklist/template"),
        json={"template": template},
        headers=ws.pm.headers,
    )

    assert resp.status_code == 201
    assert resp.json()["total"] == size
    listed = await client.get(ws.url(f"releases/{release['id']}/checklist"), headers=ws.stakeholder.headers)
    assert listed.json()["total"] == size

    entries = await api.activity(ws.slug, ws.admin, entity_type="CHECKLIST_ITEM", limit=200)
    assert len(entries) == size
    assert {e["action"] for e in entries} == {"CHECKLIST_ITEM_CREATED"}


async def test_apply_template_requires_product_manager(client, ws):
    release = await create_release(client, ws)
    resp = await client.post(
        ws.url(f"releases/{release['id']}/checklist/template"),
        json={"template": "basic"},
        headers=ws.contributor.headers,
    )
    assert resp.status_code == 403


async def test_unknown_template_rejected(client, ws):
    release = await create_release(client, ws)
    resp = await client.post(
        ws.url(f"releases/{release['id']}/checklist/template"),
        json={"template": "galactic"},
        headers=ws.pm.headers,
    )
    assert resp.status_code == 422


async def test_readiness(client, ws):
    release = await create_release(client, ws)
    required = await create_item(client, ws, release["id"], title="Backups", is_required=True)
    optional = await create_item(client, ws, release["id"], title="Blog post")
    url = ws.url(f"releases/{release['id']}/readiness")

    empty_progress = (await client.get(url, headers=ws.stakeholder.headers)).json()
    assert empty_progress["ready"] is False
    assert empty_progress["total"] == 2
    assert empty_progress["required"] == 1

    await client.post(ws.url(f"checklist/{optional['id']}/toggle"), headers=ws.contributor.headers)
    half = (await client.get(url, headers=ws.stakeholder.headers)).json()
    assert half["completed"] == 1
    assert half["percent_complete"] == 50.0
    assert half["ready"] is False

    await client.post(ws.url(f"checklist/{required['id']}/toggle"), headers=ws.contributor.headers)
    ready = (await client.get(url, headers=ws.stakeholder.headers)).json()
    assert ready["required_completed"] == 1
    assert ready["percent_complete"] == 100.0
    assert ready["ready"] is True


async def test_readiness_of_empty_release(client, ws):
    release = await create_release(client, ws)
    resp = await client.get(ws.url(f"releases/{release['id']}/readiness"), headers=ws.pm.headers)
    assert resp.json()["total"] == 0
    assert resp.json()["percent_complete"] == 0.0
    assert resp.json()["ready"] is True


# ---------------------------------------------------------------------------
# Changelog
# ---------------------------------------------------------------------------

async def create_changelog(client, ws, principal=None, **fields):
    principal = principal or ws.contributor
    body = {"title": "Faster search", "description": "Results load twice as fast"} | fields
    resp = await client.post(ws.product_url("changelogs"), json=body, headers=principal.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_changelog_defaults(client, ws):
    entry = await create_changelog(client, ws)
    assert entry["type"] == "feature"
    assert entry["visibility"] == "public"
    assert entry["release_id"] is None
    assert entry["created_by"] == ws.contributor.user_id


async def test_changelog_attached_to_release(client, ws):
    release = await create_release(client, ws)
    entry = await create_changelog(client, ws, release_id=release["id"], type="bug_fix")

    listed = await client.get(
        ws.product_url("changelogs"), params={"release_id": release["id"]}, headers=ws.stakeholder.headers
    )

    assert entry["release_id"] == release["id"]
    assert [e["id"] for e in listed.json()["changelogs"]] == [entry["id"]]


async def test_changelog_release_must_share_the_product(client, api, ws):
    other_product = await api.create_product(ws.slug, ws.pm)
    foreign = await client.post(
        ws.url(f"products/{other_product['id']}/releases"), json={"name": "Other", "version": "1.0.0"}, headers=ws.pm.headers
    )

    resp = await client.post(
        ws.product_url("changelogs"),
        json={"title": "x", "description": "y", "release_id": foreign.json()["id"]},
        headers=ws.contributor.headers,
    )

    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "INVALID_RELEASE"


async def test_changelog_filters(client, ws):
    await create_changelog(client, ws, title="Search", type="improvement")
    internal = await create_changelog(client, ws, title="Ops note", visibility="internal")

    by_type = await client.get(ws.product_url("changelogs"), params={"type": "improvement"}, headers=ws.pm.headers)
    by_visibility = await client.get(
        ws.product_url("changelogs"), params={"visibility": "internal"}, headers=ws.pm.headers
    )

    assert [e["title"] for e in by_type.json()["changelogs"]] == ["Search"]
    assert [e["id"] for e in by_visibility.json()["changelogs"]] == [internal["id"]]


async def test_deleting_a_release_keeps_its_changelog(client, ws):
    release = await create_release(client, ws)
    entry = await create_changelog(client, ws, release_id=release["id"])
    await client.get(ws.product_url("changelogs"), headers=ws.pm.headers)

    await client.delete(ws.url(f"releases/{release['id']}"), headers=ws.pm.headers)

    listed = await client.get(ws.product_url("changelogs"), headers=ws.pm.headers)
    assert [e["id"] for e in listed.json()["changelogs"]] == [entry["id"]]
    assert listed.json()["changelogs"][0]["release_id"] is None


async def test_changelog_roles(client, ws):
    entry = await create_changelog(client, ws)

    stakeholder = await client.post(
        ws.product_url("changelogs"), json={"title": "x", "description": "y"}, headers=ws.stakeholder.headers
    )
    contributor_edit = await client.patch(
        ws.url(f"changelogs/{entry['id']}"), json={"visibility": "private"}, headers=ws.contributor.headers
    )
    contributor_delete = await client.delete(ws.url(f"changelogs/{entry['id']}"), headers=ws.contributor.headers)
    pm_delete = await client.delete(ws.url(f"changelogs/{entry['id']}"), headers=ws.pm.headers)

    assert stakeholder.status_code == 403
    assert contributor_edit.status_code == 200
    assert contributor_delete.status_code == 403
    assert pm_delete.status_code == 200
