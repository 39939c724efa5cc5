"""
Idea tests: scoring, ordering, voting and owner permissions.
"""

import pytest


async def create_idea(client, ws, principal, **fields):
    body = {"title": "Idea"} | fields
    resp = await client.post(ws.product_url("ideas"), json=body, headers=principal.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_defaults_and_scores(client, ws):
    idea = await create_idea(
        client, ws, ws.contributor, title="Bulk export", reach=4, impact=3, confidence=5, effort=3
    )

    assert idea["status"] == "submitted"
    assert idea["votes"] == 0
    assert idea["created_by"] == ws.contributor.user_id
    assert idea["rice_score"] == 20.0
    assert idea["ice_score"] == 45.0
    assert idea["wsjf_score"] == 2.0


async def test_unscored_idea_has_no_scores(client, ws):
    idea = await create_idea(client, ws, ws.contributor, impact=3)
    assert idea["rice_score"] is None
    assert idea["ice_score"] is None
    assert idea["wsjf_score"] is None


async def test_scores_outside_scale_rejected(client, ws):
    resp = await client.post(
        ws.product_url("ideas"), json={"title": "Too big", "reach": 6}, headers=ws.contributor.headers
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["field"] == "reach"


async def test_list_sorted_by_rice_with_unscored_last(client, ws):
    unscored = await create_idea(client, ws, ws.contributor, title="Unscored")
    low = await create_idea(client, ws, ws.contributor, title="Low", reach=1, impact=1, confidence=1, effort=5)
    high = await create_idea(client, ws, ws.contributor, title="High", reach=5, impact=5, confidence=5, effort=1)

    resp = await client.get(ws.product_url("ideas"), headers=ws.stakeholder.headers)

    assert resp.status_code == 200
    assert [i["id"] for i in resp.json()["ideas"]] == [high["id"], low["id"], unscored["id"]]


async def test_votes_never_drop_below_zero(client, api, ws):
    idea = await create_idea(client, ws, ws.pm)
    url = ws.url(f"ideas/{idea['id']}/vote")

    up = await client.post(url, json={"direction": "up"}, headers=ws.contributor.headers)
    assert up.json()["votes"] == 1
    down = await client.post(url, json={"direction": "down"}, headers=ws.contributor.headers)
    assert down.json()["votes"] == 0
    floor = await client.post(url, json={"direction": "down"}, headers=ws.contributor.headers)
    assert floor.json()["votes"] == 0

    entries = await api.activity(ws.slug, ws.admin, entity_id=idea["id"])
    actions = sorted(e["action"] for e in entries)
    assert actions == ["IDEA_CREATED", "IDEA_DOWNVOTED", "IDEA_DOWNVOTED", "IDEA_UPVOTED"]


async def test_stakeholder_cannot_vote(client, ws):
    idea = await create_idea(client, ws, ws.pm)
    resp = await client.post(
        ws.url(f"ideas/{idea['id']}/vote"), json={"direction": "up"}, headers=ws.stakeholder.headers
    )
    assert resp.status_code == 403


async def test_invalid_vote_direction(client, ws):
    idea = await create_idea(client, ws, ws.pm)
    resp = await client.post(
        ws.url(f"ideas/{idea['id']}/vote"), json={"direction": "sideways"}, headers=ws.pm.headers
    )
    assert resp.status_code == 422


async def test_creator_can_update_own_idea(client, api, ws):
    idea = await create_idea(client, ws, ws.contributor)
    other = await api.add_member(ws.slug, ws.admin, "contributor")
    url = ws.url(f"ideas/{idea['id']}")

    own = await client.patch(url, json={"title": "Mine"}, headers=ws.contributor.headers)
    foreign = await client.patch(url, json={"title": "Theirs"}, headers=other.headers)
    manager = await client.patch(url, json={"problem": "Slow checkout"}, headers=ws.pm.headers)

    assert own.status_code == 200
    assert own.json()["title"] == "Mine"
    assert foreign.status_code == 403
    assert manager.status_code == 200
    assert manager.json()["problem"] == "Slow checkout"


async def test_delete_by_creator_or_admin_only(client, ws):
    by_creator = await create_idea(client, ws, ws.contributor)
    by_pm = await create_idea(client, ws, ws.pm)

    creator = await client.delete(ws.url(f"ideas/{by_creator['id']}"), headers=ws.contributor.headers)
    contributor = await client.delete(ws.url(f"ideas/{by_pm['id']}"), headers=ws.contributor.headers)
    admin = await client.delete(ws.url(f"ideas/{by_pm['id']}"), headers=ws.admin.headers)

    assert creator.status_code == 200
    assert contributor.status_code == 403
    assert admin.status_code == 200


async def test_pm_cannot_delete_someone_elses_idea(client, ws):
    idea = await create_idea(client, ws, ws.contributor)
    resp = await client.delete(ws.url(f"ideas/{idea['id']}"), headers=ws.pm.headers)
    assert resp.status_code == 403


@pytest.mark.parametrize("status", ["reviewing", "approved", "rejected", "converted"])
async def test_set_status(client, ws, status):
    idea = await create_idea(client, ws, ws.contributor)
    resp = await client.put(
        ws.url(f"ideas/{idea['id']}/status"), json={"status": status}, headers=ws.pm.headers
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == status


async def test_creator_cannot_set_status(client, ws):
    idea = await create_idea(client, ws, ws.contributor)
    resp = await client.put(
        ws.url(f"ideas/{idea['id']}/status"), json={"status": "approved"}, headers=ws.contributor.headers
    )
    assert resp.status_code == 403
