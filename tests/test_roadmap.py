"""
Roadmap tests: lanes, moves and status.
"""


async def create_item(client, ws, **fields):
    body = {"title": "Item"} | fields
    resp = await client.post(ws.product_url("roadmap/items"), json=body, headers=ws.pm.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_defaults(client, ws):
    item = await create_item(client, ws)
    assert item["lane"] == "later"
    assert item["status"] == "planned"
    assert item["type"] == "feature"
    assert item["position"] == 0
    assert item["created_by"] == ws.pm.user_id


async def test_contributor_cannot_shape_roadmap(client, ws):
    item = await create_item(client, ws)

    create = await client.post(
        ws.product_url("roadmap/items"), json={"title": "Mine"}, headers=ws.contributor.headers
    )
    move = await client.put(
        ws.url(f"roadmap/{item['id']}/lane"), json={"lane": "now"}, headers=ws.contributor.headers
    )

    assert create.status_code == 403
    assert move.status_code == 403


async def test_end_date_before_start_rejected(client, ws):
    resp = await client.post(
        ws.product_url("roadmap/items"),
        json={"title": "Backwards", "start_date": "2026-06-01", "end_date": "2026-05-01"},
        headers=ws.pm.headers,
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["field"] == "end_date"


async def test_update_checks_dates_against_stored_values(client, ws):
    item = await create_item(client, ws, start_date="2026-06-01")
    resp = await client.patch(
        ws.url(f"roadmap/{item['id']}"), json={"end_date": "2026-05-01"}, headers=ws.pm.headers
    )
    assert resp.status_code == 422

    ok = await client.patch(
        ws.url(f"roadmap/{item['id']}"), json={"end_date": "2026-07-01"}, headers=ws.pm.headers
    )
    assert ok.json()["end_date"] == "2026-07-01"


# ---------------------------------------------------------------------------
# Lanes
# ---------------------------------------------------------------------------

async def test_lanes_grouped_in_order(client, ws):
    parked = await create_item(client, ws, title="Parked", lane="parked")
    second = await create_item(client, ws, title="Second", lane="now", position=1)
    first = await create_item(client, ws, title="First", lane="now", position=0)

    resp = await client.get(ws.product_url("roadmap"), headers=ws.stakeholder.headers)

    lanes = resp.json()["lanes"]
    assert [lane["lane"] for lane in lanes] == ["now", "next", "later", "parked"]
    assert [i["id"] for i in lanes[0]["items"]] == [first["id"], second["id"]]
    assert lanes[1]["items"] == []
    assert [i["id"] for i in lanes[3]["items"]] == [parked["id"]]


async def test_move_without_position_goes_to_end_of_lane(client, api, ws):
    await create_item(client, ws, lane="now", position=4)
    item = await create_item(client, ws)

    resp = await client.put(ws.url(f"roadmap/{item['id']}/lane"), json={"lane": "now"}, headers=ws.pm.headers)

    assert resp.status_code == 200
    assert resp.json()["lane"] == "now"
    assert resp.json()["position"] == 5

    entries = await api.activity(ws.slug, ws.admin, entity_id=item["id"])
    moved = next(e for e in entries if e["action"] == "ROADMAP_ITEM_MOVED")
    assert moved["metadata"]["from"] == {"lane": "later", "position": 0}
    assert moved["metadata"]["to"] == {"lane": "now", "position": 5}


async def test_move_into_empty_lane_starts_at_zero(client, ws):
    item = await create_item(client, ws, position=3)
    resp = await client.put(ws.url(f"roadmap/{item['id']}/lane"), json={"lane": "next"}, headers=ws.pm.headers)
    assert resp.json()["position"] == 0


async def test_move_with_explicit_position(client, ws):
    item = await create_item(client, ws)
    resp = await client.put(
        ws.url(f"roadmap/{item['id']}/lane"), json={"lane": "parked", "position": 7}, headers=ws.pm.headers
    )
    assert resp.json()["lane"] == "parked"
    assert resp.json()["position"] == 7


async def test_lanes_refresh_after_move(client, ws):
    item = await create_item(client, ws)
    before = await client.get(ws.product_url("roadmap"), headers=ws.pm.headers)
    assert [i["id"] for i in before.json()["lanes"][2]["items"]] == [item["id"]]

    await client.put(ws.url(f"roadmap/{item['id']}/lane"), json={"lane": "now"}, headers=ws.pm.headers)

    after = await client.get(ws.product_url("roadmap"), headers=ws.pm.headers)
    assert [i["id"] for i in after.json()["lanes"][0]["items"]] == [item["id"]]
    assert after.json()["lanes"][2]["items"] == []


async def test_lanes_drop_deleted_items(client, ws):
    item = await create_item(client, ws)
    await client.get(ws.product_url("roadmap"), headers=ws.pm.headers)

    await client.delete(ws.url(f"roadmap/{item['id']}"), headers=ws.pm.headers)

    after = await client.get(ws.product_url("roadmap"), headers=ws.pm.headers)
    assert all(lane["items"] == [] for lane in after.json()["lanes"])


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

async def test_set_status(client, api, ws):
    item = await create_item(client, ws)

    resp = await client.put(
        ws.url(f"roadmap/{item['id']}/status"), json={"status": "in_progress"}, headers=ws.pm.headers
    )

    assert resp.json()["status"] == "in_progress"
    entries = await api.activity(ws.slug, ws.admin, entity_id=item["id"])
    changed = next(e for e in entries if e["action"] == "ROADMAP_ITEM_STATUS_CHANGED")
    assert changed["metadata"]["from"] == "planned"
    assert changed["metadata"]["to"] == "in_progress"


async def test_unknown_status_rejected(client, ws):
    item = await create_item(client, ws)
    resp = await client.put(
        ws.url(f"roadmap/{item['id']}/status"), json={"status": "shipped"}, headers=ws.pm.headers
    )
    assert resp.status_code == 422
