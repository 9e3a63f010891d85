"""
Engine and session wiring.

``build_engine`` owns the per-backend connection choices so the app,
Alembic and the test suite all open the store the same way:

- PostgreSQL (asyncpg) gets a sized pool with pre-ping.
- SQLite (aiosqlite, used for local runs and tests) skips pool sizing;
  an in-memory URL is pinned to one shared connection because every new
  connection would otherwise see its own empty database.
"""
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from newsdesk.config import settings
from newsdesk.middleware import install_query_counter


def build_engine(url: str, **overrides) -> AsyncEngine:
    parsed = make_url(url)
    options = {"echo": settings.DEBUG}
    if parsed.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
    else:
        options["pool_pre_ping"] = True
        if "poolclass" not in overrides:
            options.update(pool_size=settings.DB_POOL_SIZE, max_overflow=settings.DB_MAX_OVERFLOW)
    options.update(overrides)
    return create_async_engine(url, **options)


engine = build_engine(settings.DATABASE_URL)

install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db():
    """Request-scoped session: commit when the handler returns, roll back if it raises."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
