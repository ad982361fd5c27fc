"""MongoDB client and database dependency."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorDatabase,
)

from hamkar.config import settings
from hamkar.db.base import ensure_indexes

logger = structlog.get_logger(__name__)

_client: Optional[AsyncIOMotorClient] = None


def get_client() -> AsyncIOMotorClient:
    """Return the process-wide motor client, creating it on first use."""
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(
            settings.MONGODB_URI,
            maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
            serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
            tz_aware=False,
        )
    return _client


def get_database() -> AsyncIOMotorDatabase:
    return get_client()[settings.MONGODB_DATABASE]


async def get_db() -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    """Dependency to get the database handle."""
    yield get_database()


async def init_db() -> None:
    """Ping the server and create indexes."""
    db = get_database()
    await db.client.admin.command("ping")
    await ensure_indexes(db)
    logger.info("mongodb_connected", database=settings.MONGODB_DATABASE)


def close_db() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("mongodb_disconnected")


@asynccontextmanager
async def transaction(db: AsyncIOMotorDatabase) -> AsyncGenerator[Optional[AsyncIOMotorClientSession], None]:
    """
    Run a block inside a multi-document transaction when enabled.

    Yields the session to pass as ``session=`` to each write, or ``None`` when
    transactions are disabled (standalone servers do not support them).
    """
    if not settings.MONGODB_USE_TRANSACTIONS:
        yield None
        return

    async with await db.client.start_session() as session:
        async with session.start_transaction():
            yield session
