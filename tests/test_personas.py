"""
Persona tests.
"""


async def create_persona(client, ws, **fields):
    body = {"name": "Busy buyer", "description": "Shops on the commute"} | fields
    resp = await client.post(ws.product_url("personas"), json=body, headers=ws.pm.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_with_profile(client, ws):
    persona = await create_persona(
        client,
        ws,
        demographics={"age": "25-34", "location": "urban"},
        goals=["Check out in under a minute"],
        pains=["Re-entering card details"],
    )
    assert persona["is_primary"] is False
    assert persona["demographics"]["age"] == "25-34"
    assert persona["goals"] == ["Check out in under a minute"]
    assert persona["channels"] == []


async def test_description_required(client, ws):
    resp = await client.post(ws.product_url("personas"), json={"name": "Nameless"}, headers=ws.pm.headers)
    assert resp.status_code == 422
    assert resp.json()["detail"]["field"] == "description"


async def test_list_puts_primary_first(client, ws):
    await create_persona(client, ws, name="Admin Ann")
    await create_persona(client, ws, name="Casual Carl")
    zed = await create_persona(client, ws, name="Zed the power user", is_primary=True)

    resp = await client.get(ws.product_url("personas"), headers=ws.stakeholder.headers)

    names = [p["name"] for p in resp.json()["personas"]]
    assert names == [zed["name"], "Admin Ann", "Casual Carl"]


async def test_set_primary(client, api, ws):
    persona = await create_persona(client, ws)

    resp = await client.put(
        ws.url(f"personas/{persona['id']}/primary"), json={"is_primary": True}, headers=ws.pm.headers
    )

    assert resp.status_code == 200
    assert resp.json()["is_primary"] is True
    entries = await api.activity(ws.slug, ws.admin, entity_id=persona["id"])
    changed = [e for e in entries if e["action"] == "PERSONA_PRIORITY_CHANGED"]
    assert changed[0]["metadata"] == {"field": "is_primary", "from": False, "to": True}


async def test_duplicate_is_never_primary(client, ws):
    persona = await create_persona(client, ws, is_primary=True, goals=["Speed"])

    resp = await client.post(ws.url(f"personas/{persona['id']}/duplicate"), headers=ws.pm.headers)

    assert resp.status_code == 201
    assert resp.json()["name"] == "Busy buyer (Copy)"
    assert resp.json()["goals"] == ["Speed"]
    assert resp.json()["is_primary"] is False


async def test_personas_are_managed_by_product_managers(client, ws):
    persona = await create_persona(client, ws)

    create = await client.post(
        ws.product_url("personas"), json={"name": "x", "description": "y"}, headers=ws.contributor.headers
    )
    update = await client.patch(ws.url(f"personas/{persona['id']}"), json={"name": "z"}, headers=ws.contributor.headers)
    primary = await client.put(
        ws.url(f"personas/{persona['id']}/primary"), json={"is_primary": True}, headers=ws.contributor.headers
    )
    copy = await client.post(ws.url(f"personas/{persona['id']}/duplicate"), headers=ws.contributor.headers)
    delete = await client.delete(ws.url(f"personas/{persona['id']}"), headers=ws.contributor.headers)

    assert [r.status_code for r in (create, update, primary, copy, delete)] == [403] * 5


async def test_stakeholder_reads(client, ws):
    persona = await create_persona(client, ws)
    resp = await client.get(ws.url(f"personas/{persona['id']}"), headers=ws.stakeholder.headers)
    assert resp.status_code == 200
