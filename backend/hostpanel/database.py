"""Credential store — async SQLite engine and session dependency."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from hostpanel.config import settings
from hostpanel.models import Base

logger = logging.getLogger(__name__)


def _on_connect(dbapi_conn, _connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    # Wait for a concurrent writer instead of failing the login with "database is locked"
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def build_engine(url: str) -> AsyncEngine:
    """Create an aiosqlite engine with the connection PRAGMAs attached."""
    engine = create_async_engine(url, echo=settings.debug and settings.log_level == "DEBUG")
    event.listen(engine.sync_engine, "connect", _on_connect)
    return engine


db_path = Path(settings.database_path)
db_path.parent.mkdir(parents=True, exist_ok=True)

engine = build_engine(f"sqlite+aiosqlite:///{db_path}")
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency — one session per request."""
    async with async_session() as session:
        yield session


async def init_db(target: AsyncEngine | None = None) -> None:
    """Create the ``credentials`` table if missing. The schema never migrates."""
    target = target or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Credential store ready at %s", target.url.database)


async def close_db() -> None:
    await engine.dispose()
