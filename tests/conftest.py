"""
Test infrastructure for the newsdesk API.

Strategy
--------
- Environment overrides are applied before any ``newsdesk`` import so the
  settings singleton picks them up: an in-memory SQLite URL for the
  application engine and the minimum bcrypt cost so hashing stays fast.
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI.  ``newsdesk.database.build_engine`` pins an in-memory URL
  to a single shared connection, so the app's own engine and ``get_db``
  serve the tests unchanged and fixtures write through the same store.
- All tables are created fresh before each test and dropped after.
"""
import os

# Never inherited: every test drops all tables.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from newsdesk.database import Base, async_session, engine  # noqa: E402
from newsdesk.derivations import default_avatar_url, utcnow  # noqa: E402
from newsdesk.main import app  # noqa: E402
from newsdesk.models import Role  # noqa: E402
from newsdesk.security import hash_password, token_for  # noqa: E402
from newsdesk.services import user_service  # noqa: E402

ADMIN_EMAIL = "admin@newsdesk.test"
ADMIN_PASSWORD = "admin-pass"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """
    Yield a live AsyncSession for tests that talk to the store directly.
    """
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """Yield an httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def admin_token() -> str:
    """
    Bearer token for an admin account.

    Admins cannot be created through the public surface, so the row is
    written straight into the store the way the seed script does it.
    """
    now = utcnow()
    async with async_session() as session:
        admin = await user_service.create_user(session, {
            "first_name": "Admin",
            "last_name": "User",
            "email": ADMIN_EMAIL,
            "password_hash": hash_password(ADMIN_PASSWORD),
            "avatar": default_avatar_url("Admin", "User"),
            "role": Role.ADMIN,
            "email_verified": True,
            "created_at": now,
            "updated_at": now,
            "last_login": None,
        })
        await session.commit()
        return token_for(admin)


@pytest.fixture
def call(async_client: AsyncClient):
    """
    Return ``call(operation, arguments=None, token=None)`` which posts to
    the operation endpoint and returns the decoded JSON envelope.
    """

    async def _call(operation: str, arguments: dict | None = None, token: str | None = None) -> dict:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        resp = await async_client.post(
            "/api/v1/query",
            json={"operation": operation, "arguments": arguments or {}},
            headers=headers,
        )
        assert resp.status_code == 200
        return resp.json()

    return _call


@pytest.fixture
def register(call):
    """Return ``register(first, email, password="secret1")`` -> (token, user dict)."""

    async def _register(first_name: str, email: str, password: str = "secret1"):
        body = await call("register", {
            "firstName": first_name,
            "lastName": "Reader",
            "email": email,
            "password": password,
        })
        assert "errors" not in body, body
        payload = body["data"]["register"]
        return payload["token"], payload["user"]

    return _register
