"""
ProjectDesk Database Configuration

SQLAlchemy async engine for the primary store.
SQLite for development, PostgreSQL (asyncpg) in production.
"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import event
from .config import settings


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


# SQLite needs a lock timeout and cross-thread access for aiosqlite
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
    connect_args={
        "timeout": 30,
        "check_same_thread": False,
    } if _is_sqlite(settings.database_url) else {},
)


def configure_sqlite(dbapi_connection, connection_record):
    """Enable foreign keys (cascade deletes) and WAL on SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.close()


if _is_sqlite(settings.database_url):
    event.listen(engine.sync_engine, "connect", configure_sqlite)


# Session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """Dependency to get database session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
