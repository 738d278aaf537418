# python
"""Database engine and session utilities.

This module builds the asynchronous database engine and session factory used
by the SQL row-store, and creates the schema where migrations are not in use.
"""
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from app.core.config import Settings
from models import Base


def create_engine(config: Settings) -> AsyncEngine:
    """Create the async engine for the configured database."""
    db_url = (config.database_url or "").strip()
    if not db_url:
        raise RuntimeError(
            "DATABASE_URL is not configured. Set it in the environment or .env file (e.g., DATABASE_URL=postgresql+asyncpg://<user>:<pass>@<host>/<db>)."
        )
    return create_async_engine(db_url, echo=config.debug)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
