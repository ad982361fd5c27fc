"""Collection names, index definitions and document helpers."""

from datetime import datetime
from typing import Any, Dict, Optional

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, IndexModel

from hamkar.core.exceptions import NotFoundError

logger = structlog.get_logger(__name__)

DEVELOPERS = "developers"
EMPLOYERS = "employers"
PROJECTS = "projects"
JOB_REQUESTS = "job_requests"

INDEXES = {
    DEVELOPERS: [
        IndexModel([("email", ASCENDING)], unique=True, name="email_unique"),
        IndexModel(
            [
                ("skills", ASCENDING),
                ("city", ASCENDING),
                ("experience_years", ASCENDING),
                ("is_available", ASCENDING),
            ],
            name="search",
        ),
        IndexModel([("created_at", DESCENDING)], name="created_at"),
    ],
    EMPLOYERS: [
        IndexModel([("email", ASCENDING)], unique=True, name="email_unique"),
        IndexModel(
            [("company_name", ASCENDING), ("city", ASCENDING), ("industry", ASCENDING)],
            name="search",
        ),
    ],
    PROJECTS: [
        IndexModel(
            [
                ("title", ASCENDING),
                ("tech_stack", ASCENDING),
                ("developer_id", ASCENDING),
                ("is_public", ASCENDING),
            ],
            name="search",
        ),
        IndexModel([("created_at", DESCENDING)], name="created_at"),
    ],
    JOB_REQUESTS: [
        IndexModel([("employer_id", ASCENDING), ("status", ASCENDING)], name="employer_status"),
        IndexModel([("developer_id", ASCENDING), ("status", ASCENDING)], name="developer_status"),
        IndexModel([("status", ASCENDING), ("created_at", DESCENDING)], name="status_created_at"),
        # At most one pending request per employer/developer pair
        IndexModel(
            [("employer_id", ASCENDING), ("developer_id", ASCENDING)],
            unique=True,
            partialFilterExpression={"status": "pending"},
            name="one_pending_per_pair",
        ),
    ],
}


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    for collection_name, indexes in INDEXES.items():
        names = await db[collection_name].create_indexes(indexes)
        logger.info("indexes_ensured", collection=collection_name, indexes=names)


def utcnow() -> datetime:
    # MongoDB stores millisecond precision; truncate so round-trips compare equal
    now = datetime.utcnow()
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def parse_object_id(value: Any, resource: str = "Resource") -> ObjectId:
    """Convert a path/body id to ObjectId; malformed ids are treated as missing."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise NotFoundError(f"{resource} not found")


def serialize(value: Any) -> Any:
    """Recursively convert ObjectIds to strings for JSON output."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(item) for item in value]
    return value


def to_str_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Rename ``_id`` to ``id`` and stringify all ObjectIds."""
    if doc is None:
        return None
    d = dict(doc)
    if "_id" in d:
        d["id"] = d.pop("_id")
    return serialize(d)
