"""
Pytest configuration for ProdMatic backend tests.

The API runs in-process over httpx's ASGI transport against an in-memory
SQLite database; Redis is replaced by a small in-memory double and the
invitation e-mail task is never queued.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-prodmatic-suite-0123456789")
os.environ.setdefault("LOG_FORMAT", "text")

import uuid
from dataclasses import dataclass, field

import bcrypt
import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from prodmatic.core import database
from prodmatic.core.dependencies import get_redis
from prodmatic.main import app
from prodmatic.models import Base
from prodmatic.workers.email_tasks import send_invitation_email

API = "/api/v1"


class FakeRedis:
    """In-memory double for the Redis commands the API issues."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.published: list[tuple[str, str]] = []

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.store[key] = value
        return True

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        return True

    async def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if key in self.store)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    async def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return 0

    async def aclose(self) -> None:
        pass


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """bcrypt cost 12 makes every registration slow; 4 rounds is enough here."""
    real_gensalt = bcrypt.gensalt
    monkeypatch.setattr(bcrypt, "gensalt", lambda rounds=12, prefix=b"2b": real_gensalt(4, prefix))


@pytest.fixture(autouse=True)
def sent_invitations(monkeypatch) -> list[dict]:
    sent: list[dict] = []
    monkeypatch.setattr(send_invitation_email, "delay", lambda **kwargs: sent.append(kwargs))
    return sent


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_manager(engine):
    previous = database.db_manager
    manager = database.DatabaseSessionManager.from_engine(engine)
    database.db_manager = manager
    yield manager
    database.db_manager = previous


@pytest.fixture
def redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
async def client(db_manager, redis):
    async def override_redis() -> FakeRedis:
        return redis

    app.dependency_overrides[get_redis] = override_redis
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# API helpers
# ---------------------------------------------------------------------------

@dataclass
class Principal:
    user_id: str
    email: str
    access_token: str
    refresh_token: str
    headers: dict[str, str] = field(default_factory=dict)


class Api:
    """Thin helpers over the HTTP API for arranging test state."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def register(self, prefix: str = "user", password: str = "password123") -> Principal:
        email = f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"
        resp = await self.client.post(
            f"{API}/auth/register",
            json={"email": email, "password": password, "display_name": prefix.title()},
        )
        assert resp.status_code == 201, f"Register failed: {resp.text}"
        tokens = resp.json()
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}
        me = await self.client.get(f"{API}/auth/me", headers=headers)
        assert me.status_code == 200, f"Me failed: {me.text}"
        return Principal(
            user_id=me.json()["id"],
            email=email,
            access_token=tokens["access_token"],
            refresh_token=tokens["refresh_token"],
            headers=headers,
        )

    async def create_org(self, owner: Principal, name: str = "Acme Labs") -> str:
        slug = f"org-{uuid.uuid4().hex[:8]}"
        resp = await self.client.post(
            f"{API}/organizations",
            json={"name": name, "slug": slug},
            headers=owner.headers,
        )
        assert resp.status_code == 201, f"Create org failed: {resp.text}"
        return slug

    async def invite(self, slug: str, admin: Principal, email: str, role: str) -> dict:
        resp = await self.client.post(
            f"{API}/organizations/{slug}/invitations",
            json={"email": email, "role": role},
            headers=admin.headers,
        )
        assert resp.status_code == 201, f"Invite failed: {resp.text}"
        return resp.json()

    async def add_member(self, slug: str, admin: Principal, role: str) -> Principal:
        member = await self.register(role)
        invitation = await self.invite(slug, admin, member.email, role)
        resp = await self.client.post(
            f"{API}/organizations/invitations/{invitation['token']}/accept",
            headers=member.headers,
        )
        assert resp.status_code == 200, f"Accept invite failed: {resp.text}"
        return member

    async def create_product(self, slug: str, pm: Principal, key: str | None = None) -> dict:
        resp = await self.client.post(
            f"{API}/organizations/{slug}/products",
            json={"name": "Checkout", "key": key or f"P{uuid.uuid4().hex[:4].upper()}"},
            headers=pm.headers,
        )
        assert resp.status_code == 201, f"Create product failed: {resp.text}"
        return resp.json()

    async def activity(self, slug: str, principal: Principal, **params) -> list[dict]:
        resp = await self.client.get(
            f"{API}/organizations/{slug}/activity",
            params={k: str(v) for k, v in params.items()},
            headers=principal.headers,
        )
        assert resp.status_code == 200, f"Activity failed: {resp.text}"
        return resp.json()["activities"]


@dataclass
class Workspace:
    """An organization with one member per role, an outsider and a product."""

    slug: str
    admin: Principal
    pm: Principal
    contributor: Principal
    stakeholder: Principal
    outsider: Principal
    product_id: str

    def url(self, path: str) -> str:
        return f"{API}/organizations/{self.slug}/{path.lstrip('/')}"

    def product_url(self, path: str = "") -> str:
        return self.url(f"products/{self.product_id}/{path}".rstrip("/"))


@pytest.fixture
def api(client) -> Api:
    return Api(client)


@pytest.fixture
async def ws(api) -> Workspace:
    admin = await api.register("admin")
    slug = await api.create_org(admin)
    pm = await api.add_member(slug, admin, "product_manager")
    contributor = await api.add_member(slug, admin, "contributor")
    stakeholder = await api.add_member(slug, admin, "stakeholder")
    outsider = await api.register("outsider")
    product = await api.create_product(slug, pm)
    return Workspace(
        slug=slug,
        admin=admin,
        pm=pm,
        contributor=contributor,
        stakeholder=stakeholder,
        outsider=outsider,
        product_id=product["id"],
    )
