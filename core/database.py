"""
Database Management and Configuration.

This module sets up the asynchronous database engine used by the comment store.
It uses SQLAlchemy with `asyncio` support and SQLModel for the table
definition.

Key Components:
- `create_engine_for`: builds the async engine for a `sqlite+aiosqlite` URL.
  Other database backends are not supported.
- `create_session_factory`: the session factory bound to an engine.
- `create_db_and_tables`: the startup bootstrap that creates the `comments`
  table when it does not exist yet. Running it twice is a no-op.
- `get_database_info`: diagnostic information for the health endpoint.

Engines are created explicitly and handed to the store instead of living in
module globals, so tests can point each run at its own database file.
"""

import logging
from typing import Any, Dict
from sqlmodel import SQLModel
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

# Registers the comments table on SQLModel.metadata
from core.models import Comment

logger = logging.getLogger(__name__)


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for a `sqlite+aiosqlite` database URL"""
    if not database_url.startswith("sqlite"):
        raise ValueError(f"Only SQLite database URLs are supported, got {database_url!r}")

    return create_async_engine(
        database_url,
        connect_args={"check_same_thread": False},
        echo=echo,
        poolclass=AsyncAdaptedQueuePool,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_db_and_tables(engine: AsyncEngine):
    """
    Create the comments table if it is absent.
    Called during application startup.
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Comments table ready")
    except Exception as e:
        logger.error(f"Failed to create comments table: {e}")
        raise


def describe_url(database_url: str) -> Dict[str, Any]:
    """Backend name and location of a database URL, with credentials masked"""
    url = make_url(database_url)
    return {
        "database_type": url.get_backend_name(),
        "database": url.database,
        "url": url.render_as_string(hide_password=True),
    }


async def get_database_info(engine: AsyncEngine) -> Dict[str, Any]:
    """
    Get basic database information for health checks.
    """
    info = describe_url(str(engine.url))
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            result = await conn.execute(
                text(f"SELECT COUNT(*) FROM {Comment.__tablename__}")
            )
            info["comment_count"] = result.scalar_one()
        info["connection_healthy"] = True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        info["connection_healthy"] = False
        info["error"] = str(e)

    return info
