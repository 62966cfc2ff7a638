"""
Async database engine and session factory.

Uses the SQLAlchemy 2.x async engine: asyncpg for PostgreSQL in production,
aiosqlite for local development and tests. Unlike a mandatory database,
persistence here is optional, so the URL is passed in by the caller rather
than required from the environment.

CHANGELOG:
- 2026-10-18: Take the URL from HarvestSettings; add create_schema()
- 2026-10-18: Initial creation
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from harvest.db.models import Base


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Args:
        database_url: Async driver URL, e.g. ``postgresql+asyncpg://...``
            or ``sqlite+aiosqlite:///harvest.db``.

    Returns:
        AsyncEngine: Configured async engine.
    """
    return create_async_engine(database_url, echo=False)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to *engine*.

    Args:
        engine: The async engine sessions should use.

    Returns:
        async_sessionmaker: Factory for creating AsyncSession instances.
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet.

    Intended for SQLite development databases and tests; PostgreSQL
    deployments run the Alembic migrations instead.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
