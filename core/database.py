import logging
from typing import Any, Optional

from pymongo import AsyncMongoClient

from core.config import get_settings


logger = logging.getLogger(__name__)

_client: Optional[AsyncMongoClient] = None
_db: Any = None


def get_database():
    """Returns the shared database handle, connecting lazily on first use."""
    global _client, _db
    if _db is None:
        settings = get_settings()
        _client = AsyncMongoClient(settings.mongodb_uri, tz_aware=True)
        _db = _client[settings.mongodb_db]
        logger.info("MongoDB client created for database %s", settings.mongodb_db)
    return _db


def set_database(database: Any) -> None:
    """Swaps the database handle, e.g. for an in-memory double in tests."""
    global _db
    _db = database


def get_collection(name: str):
    return get_database()[name]


async def close_database() -> None:
    global _client, _db
    if _client is not None:
        await _client.close()
        logger.info("MongoDB client closed")
    _client = None
    _db = None
