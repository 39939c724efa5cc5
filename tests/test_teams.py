"""
Team tests.

Teams belong to one organization and only hold that organization's members.
"""

from sqlalchemy import func, select

from prodmatic.models import TeamMember


async def create_team(client, ws, principal=None, **fields):
    principal = principal or ws.pm
    body = {"name": "Growth Squad"} | fields
    resp = await client.post(ws.url("teams"), json=body, headers=principal.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def add_member(client, ws, team, user_id, role=None, principal=None):
    principal = principal or ws.pm
    body = {"user_id": user_id} | ({"role": role} if role else {})
    return await client.post(ws.url(f"teams/{team['id']}/members"), json=body, headers=principal.headers)


async def member_ids(client, ws, team):
    resp = await client.get(ws.url(f"teams/{team['id']}/members"), headers=ws.stakeholder.headers)
    assert resp.status_code == 200, resp.text
    return [m["user_id"] for m in resp.json()["members"]]


async def test_create_derives_slug(client, ws):
    team = await create_team(client, ws)
    assert team["slug"] == "growth-squad"
    assert team["created_by"] == ws.pm.user_id


async def test_slug_unique_within_org(client, api, ws):
    await create_team(client, ws, slug="core")

    taken = await client.post(ws.url("teams"), json={"name": "Other", "slug": "core"}, headers=ws.pm.headers)
    other_org = await api.create_org(ws.admin, name="Second Org")
    elsewhere = await client.post(
        f"/api/v1/organizations/{other_org}/teams", json={"name": "Other", "slug": "core"}, headers=ws.admin.headers
    )

    assert taken.status_code == 409
    assert taken.json()["detail"]["code"] == "TEAM_SLUG_TAKEN"
    assert elsewhere.status_code == 201


async def test_slug_of_deleted_team_can_be_reused(client, ws):
    team = await create_team(client, ws, slug="core")
    await client.delete(ws.url(f"teams/{team['id']}"), headers=ws.admin.headers)

    resp = await client.post(ws.url("teams"), json={"name": "Core", "slug": "core"}, headers=ws.pm.headers)

    assert resp.status_code == 201


async def test_list_teams_is_sorted_and_cached(client, ws):
    await create_team(client, ws, name="Platform")
    await create_team(client, ws, name="Checkout")
    first = await client.get(ws.url("teams"), headers=ws.stakeholder.headers)

    await create_team(client, ws, name="Billing")
    second = await client.get(ws.url("teams"), headers=ws.stakeholder.headers)

    assert [t["name"] for t in first.json()["teams"]] == ["Checkout", "Platform"]
    assert [t["name"] for t in second.json()["teams"]] == ["Billing", "Checkout", "Platform"]


async def test_rename_records_changes(client, api, ws):
    team = await create_team(client, ws)

    resp = await client.patch(ws.url(f"teams/{team['id']}"), json={"name": "Growth"}, headers=ws.pm.headers)

    assert resp.status_code == 200
    entries = await api.activity(ws.slug, ws.admin, entity_id=team["id"])
    updated = [e for e in entries if e["action"] == "TEAM_UPDATED"]
    assert updated[0]["metadata"]["changes"]["name"] == {"old": "Growth Squad", "new": "Growth"}


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------

async def test_contributor_cannot_create(client, ws):
    resp = await client.post(ws.url("teams"), json={"name": "Rogue"}, headers=ws.contributor.headers)
    assert resp.status_code == 403


async def test_delete_requires_admin(client, ws):
    team = await create_team(client, ws)
    denied = await client.delete(ws.url(f"teams/{team['id']}"), headers=ws.pm.headers)
    allowed = await client.delete(ws.url(f"teams/{team['id']}"), headers=ws.admin.headers)
    gone = await client.get(ws.url(f"teams/{team['id']}"), headers=ws.admin.headers)

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert gone.json()["detail"]["code"] == "TEAM_NOT_FOUND"


async def test_outsider_cannot_read(client, ws):
    team = await create_team(client, ws)
    resp = await client.get(ws.url(f"teams/{team['id']}"), headers=ws.outsider.headers)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

async def test_add_org_member(client, api, ws):
    team = await create_team(client, ws)

    resp = await add_member(client, ws, team, ws.contributor.user_id)

    assert resp.status_code == 201
    assert resp.json()["role"] == "contributor"
    assert resp.json()["email"] == ws.contributor.email
    assert await member_ids(client, ws, team) == [ws.contributor.user_id]
    entries = await api.activity(ws.slug, ws.admin, entity_id=team["id"])
    added = [e for e in entries if e["action"] == "TEAM_MEMBER_ADDED"]
    assert added[0]["entity_type"] == "TEAM"
    assert added[0]["metadata"]["user_id"] == ws.contributor.user_id


async def test_outsider_cannot_join(client, ws):
    team = await create_team(client, ws)

    resp = await add_member(client, ws, team, ws.outsider.user_id)

    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "NOT_ORG_MEMBER"


async def test_member_joins_once(client, ws):
    team = await create_team(client, ws)
    await add_member(client, ws, team, ws.contributor.user_id)

    resp = await add_member(client, ws, team, ws.contributor.user_id)

    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "ALREADY_TEAM_MEMBER"


async def test_change_member_role(client, ws):
    team = await create_team(client, ws)
    await add_member(client, ws, team, ws.contributor.user_id)

    resp = await client.patch(
        ws.url(f"teams/{team['id']}/members/{ws.contributor.user_id}"),
        json={"role": "product_manager"},
        headers=ws.pm.headers,
    )

    assert resp.status_code == 200
    assert resp.json()["role"] == "product_manager"


async def test_remove_member(client, api, ws):
    team = await create_team(client, ws)
    await add_member(client, ws, team, ws.contributor.user_id)

    resp = await client.delete(ws.url(f"teams/{team['id']}/members/{ws.contributor.user_id}"), headers=ws.pm.headers)
    missing = await client.delete(ws.url(f"teams/{team['id']}/members/{ws.contributor.user_id}"), headers=ws.pm.headers)

    assert resp.status_code == 200
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "TEAM_MEMBER_NOT_FOUND"
    assert await member_ids(client, ws, team) == []
    entries = await api.activity(ws.slug, ws.admin, entity_id=team["id"])
    assert "TEAM_MEMBER_REMOVED" in [e["action"] for e in entries]


async def test_contributor_cannot_manage_members(client, ws):
    team = await create_team(client, ws)
    resp = await add_member(client, ws, team, ws.stakeholder.user_id, principal=ws.contributor)
    assert resp.status_code == 403


async def test_leaving_the_org_leaves_its_teams(client, ws):
    team = await create_team(client, ws)
    await add_member(client, ws, team, ws.contributor.user_id)
    await add_member(client, ws, team, ws.stakeholder.user_id)

    resp = await client.delete(ws.url(f"members/{ws.contributor.user_id}"), headers=ws.admin.headers)

    assert resp.status_code == 200
    assert await member_ids(client, ws, team) == [ws.stakeholder.user_id]


async def test_deleting_a_team_drops_its_members(client, ws, db_manager):
    team = await create_team(client, ws)
    await add_member(client, ws, team, ws.contributor.user_id)

    await client.delete(ws.url(f"teams/{team['id']}"), headers=ws.admin.headers)

    async with db_manager.session() as session:
        remaining = await session.scalar(select(func.count()).select_from(TeamMember))
    assert remaining == 0
