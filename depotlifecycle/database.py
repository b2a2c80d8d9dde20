"""Database engine, session factory, and declarative base.

One DeclarativeBase for every table. SQLite (aiosqlite) is the default
store for the sample; PostgreSQL (asyncpg) is used when DATABASE_URL
points at it.

Session dependency for FastAPI:
  - get_db()  → one session per request, committed on success and rolled
                back on any exception so an aggregate is written whole or
                not at all.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from depotlifecycle.config import settings


def build_engine(database_url: str) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        if ":memory:" in database_url or database_url.endswith("://"):
            return create_async_engine(
                database_url,
                echo=settings.debug,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        return create_async_engine(
            database_url,
            echo=settings.debug,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(
        database_url,
        echo=settings.debug,
        pool_size=20,
        max_overflow=10,
        pool_pre_ping=True,
    )


engine = build_engine(settings.database_url)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# ── Base class ──────────────────────────────────────────────

class Base(DeclarativeBase):
    """Base class for every persisted entity."""
    pass


# ── Session dependency ──────────────────────────────────────

async def get_db() -> AsyncSession:
    """Yield a request-scoped session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create any missing tables."""
    import depotlifecycle.models  # noqa: F401  (registers every table)

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
