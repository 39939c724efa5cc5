"""
Role hierarchy, membership guard and cross-tenant isolation tests.

Verifies that:
- Role checks are monotonic across the hierarchy
- Membership lookups are memoized per request
- Non-members fail every guarded operation
- A contributor is denied product manager operations but not contributor ones
"""

import uuid
from types import SimpleNamespace

import pytest

from prodmatic.core.errors import UnauthorizedError
from prodmatic.core.permissions import ROLE_RANK, MembershipGuard, at_least
from prodmatic.models.member import OrgMember, OrgRole

ROLES = list(OrgRole)


class CountingSession:
    """Answers every membership query with the same row and counts queries."""

    def __init__(self, member: OrgMember | None) -> None:
        self.member = member
        self.queries = 0

    async def execute(self, stmt):
        self.queries += 1
        return SimpleNamespace(scalar_one_or_none=lambda: self.member)


def make_member(role: OrgRole) -> OrgMember:
    return OrgMember(org_id=uuid.uuid4(), user_id=uuid.uuid4(), role=role)


# ---------------------------------------------------------------------------
# 1. Role hierarchy
# ---------------------------------------------------------------------------

def test_role_rank_order():
    assert (
        ROLE_RANK[OrgRole.admin]
        > ROLE_RANK[OrgRole.product_manager]
        > ROLE_RANK[OrgRole.contributor]
        > ROLE_RANK[OrgRole.stakeholder]
    )


@pytest.mark.parametrize("minimum", ROLES)
def test_at_least_is_monotonic(minimum):
    allowed = [role for role in ROLES if at_least(role, minimum)]
    for role in allowed:
        for higher in ROLES:
            if ROLE_RANK[higher] >= ROLE_RANK[role]:
                assert at_least(higher, minimum)


def test_at_least_accepts_strings():
    assert at_least("admin", "contributor")
    assert not at_least("stakeholder", OrgRole.contributor)


# ---------------------------------------------------------------------------
# 2. Membership guard
# ---------------------------------------------------------------------------

async def test_guard_memoizes_membership_lookups():
    member = make_member(OrgRole.contributor)
    session = CountingSession(member)
    guard = MembershipGuard(session)

    for minimum in (OrgRole.stakeholder, OrgRole.contributor, OrgRole.contributor):
        assert await guard.require_role(member.user_id, member.org_id, minimum) is member

    assert session.queries == 1


async def test_guard_forget_drops_memo():
    member = make_member(OrgRole.admin)
    session = CountingSession(member)
    guard = MembershipGuard(session)

    await guard.get_membership(member.user_id, member.org_id)
    guard.forget(member.user_id, member.org_id)
    await guard.get_membership(member.user_id, member.org_id)

    assert session.queries == 2


async def test_guard_rejects_non_member():
    guard = MembershipGuard(CountingSession(None))
    with pytest.raises(UnauthorizedError) as exc:
        await guard.require_role(uuid.uuid4(), uuid.uuid4(), OrgRole.stakeholder)
    assert exc.value.code == "NOT_A_MEMBER"


async def test_guard_rejects_insufficient_role():
    member = make_member(OrgRole.contributor)
    guard = MembershipGuard(CountingSession(member))
    with pytest.raises(UnauthorizedError) as exc:
        await guard.require_role(member.user_id, member.org_id, OrgRole.product_manager)
    assert exc.value.code == "INSUFFICIENT_ROLE"


async def test_guard_owner_bypasses_role():
    member = make_member(OrgRole.stakeholder)
    guard = MembershipGuard(CountingSession(member))

    result = await guard.require_role_or_owner(
        member.user_id, member.org_id, OrgRole.admin, owner_id=member.user_id
    )
    assert result is member

    with pytest.raises(UnauthorizedError):
        await guard.require_role_or_owner(
            member.user_id, member.org_id, OrgRole.admin, owner_id=uuid.uuid4()
        )


# ---------------------------------------------------------------------------
# 3. Non-members
# ---------------------------------------------------------------------------

GUARDED_OPERATIONS = [
    ("get", "", None),
    ("get", "members", None),
    ("get", "activity", None),
    ("get", "products", None),
    ("post", "products", {"name": "Injected", "key": "INJ"}),
    ("get", "products/{product_id}/ideas", None),
    ("post", "products/{product_id}/ideas", {"title": "Injected idea"}),
    ("post", "products/{product_id}/tasks", {"title": "Injected task"}),
    ("get", "products/{product_id}/sprints", None),
    ("get", "products/{product_id}/roadmap", None),
    ("post", "invitations", {"email": "x@example.com", "role": "admin"}),
]


@pytest.mark.parametrize("method,path,body", GUARDED_OPERATIONS)
async def test_non_member_is_denied(client, ws, method, path, body):
    url = ws.url(path.format(product_id=ws.product_id)).rstrip("/")
    kwargs = {"headers": ws.outsider.headers}
    if body is not None:
        kwargs["json"] = body

    resp = await client.request(method.upper(), url, **kwargs)

    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_A_MEMBER"


async def test_unknown_org_is_not_found(client, ws):
    resp = await client.get("/api/v1/organizations/no-such-org/products", headers=ws.admin.headers)
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "ORG_NOT_FOUND"


async def test_unauthenticated_request_rejected(client):
    resp = await client.get("/api/v1/organizations/any-org/products")
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "MISSING_TOKEN"


# ---------------------------------------------------------------------------
# 4. Contributor vs product manager
# ---------------------------------------------------------------------------

async def test_contributor_denied_pm_operation_without_audit(client, api, ws):
    idea = await client.post(
        ws.product_url("ideas"), json={"title": "Dark mode"}, headers=ws.pm.headers
    )
    before = await api.activity(ws.slug, ws.admin)

    resp = await client.put(
        ws.url(f"ideas/{idea.json()['id']}/status"),
        json={"status": "approved"},
        headers=ws.contributor.headers,
    )

    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "INSUFFICIENT_ROLE"
    assert len(await api.activity(ws.slug, ws.admin)) == len(before)


async def test_contributor_allowed_contributor_operation_with_one_audit_entry(client, api, ws):
    before = await api.activity(ws.slug, ws.admin)

    resp = await client.post(
        ws.product_url("tasks"), json={"title": "Write tests"}, headers=ws.contributor.headers
    )

    assert resp.status_code == 201
    after = await api.activity(ws.slug, ws.admin)
    assert len(after) == len(before) + 1
    new = [a for a in after if a["entity_id"] == resp.json()["id"]]
    assert len(new) == 1
    assert new[0]["action"] == "TASK_CREATED"
    assert new[0]["actor_id"] == ws.contributor.user_id


@pytest.mark.parametrize(
    "role,expected",
    [
        ("stakeholder", 403),
        ("contributor", 201),
        ("pm", 201),
        ("admin", 201),
    ],
)
async def test_task_creation_is_monotonic_in_role(client, ws, role, expected):
    resp = await client.post(
        ws.product_url("tasks"), json={"title": f"By {role}"}, headers=getattr(ws, role).headers
    )
    assert resp.status_code == expected


@pytest.mark.parametrize(
    "role,expected",
    [
        ("stakeholder", 403),
        ("contributor", 403),
        ("pm", 201),
        ("admin", 201),
    ],
)
async def test_sprint_creation_requires_product_manager(client, ws, role, expected):
    resp = await client.post(
        ws.product_url("sprints"), json={"name": f"Sprint {role}"}, headers=getattr(ws, role).headers
    )
    assert resp.status_code == expected


async def test_stakeholder_can_read(client, ws):
    for path in ("products", f"products/{ws.product_id}", f"products/{ws.product_id}/tasks"):
        resp = await client.get(ws.url(path), headers=ws.stakeholder.headers)
        assert resp.status_code == 200, path
