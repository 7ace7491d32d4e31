"""Database session management for the payroll backend."""
from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from .config import get_settings

settings = get_settings()
engine_options: dict = {"future": True, "echo": False}
if settings.database_url.startswith("sqlite+"):
    # aiosqlite connections are bound to the event loop that opened them
    engine_options["connect_args"] = {"check_same_thread": False}
    engine_options["poolclass"] = NullPool
engine = create_async_engine(settings.database_url, **engine_options)

if settings.database_url.startswith("sqlite+"):

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record) -> None:
        # SQLite only honours ON DELETE CASCADE with this pragma
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()


AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async SQLAlchemy session per request."""

    async with AsyncSessionLocal() as session:
        yield session


async def create_all_tables() -> None:
    """Create every table known to the ORM metadata."""

    from . import models

    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
