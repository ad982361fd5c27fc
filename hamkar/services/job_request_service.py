"""
Job request lifecycle.

A request starts ``pending`` and ends in exactly one of ``accepted``,
``rejected`` (developer side) or ``withdrawn`` (employer side). Every status
write is a single conditional update on ``status == "pending"``, so two
concurrent transitions cannot both succeed.
"""

import asyncio
from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from hamkar.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from hamkar.core.security import CurrentAccount
from hamkar.db.base import DEVELOPERS, EMPLOYERS, JOB_REQUESTS, parse_object_id, utcnow
from hamkar.models import developer as developer_model
from hamkar.models import employer as employer_model
from hamkar.models.account import AccountKind
from hamkar.models.job_request import (
    NOTES_FIELD,
    WRITABLE_FIELDS,
    JobRequestStatus,
    check_transition,
    owner_field,
)
from hamkar.utils.helpers import PageParams, sort_direction

logger = structlog.get_logger(__name__)

SORT_FIELDS = ("created_at", "updated_at", "salary_offer", "status", "job_title")
DUPLICATE_PENDING = "You already have a pending request to this developer"


async def attach_parties(db: AsyncIOMotorDatabase, requests: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Embed employer and developer summaries into each request."""
    if not requests:
        return requests

    employer_ids = list({request["employer_id"] for request in requests})
    developer_ids = list({request["developer_id"] for request in requests})
    employers, developers = await asyncio.gather(
        db[EMPLOYERS].find({"_id": {"$in": employer_ids}}, projection={"password_hash": False}).to_list(length=None),
        db[DEVELOPERS].find({"_id": {"$in": developer_ids}}, projection={"password_hash": False}).to_list(length=None),
    )
    employers_by_id = {doc["_id"]: employer_model.summary(doc) for doc in employers}
    developers_by_id = {doc["_id"]: developer_model.summary(doc) for doc in developers}

    for request in requests:
        request["employer"] = employers_by_id.get(request["employer_id"])
        request["developer"] = developers_by_id.get(request["developer_id"])
    return requests


async def _attach_one(db: AsyncIOMotorDatabase, request: Dict[str, Any]) -> Dict[str, Any]:
    (request,) = await attach_parties(db, [request])
    return request


def _check_party(request: Dict[str, Any], account: CurrentAccount) -> None:
    if request.get(owner_field(account.kind)) != account.id:
        raise ForbiddenError("Access denied")


async def _load(db: AsyncIOMotorDatabase, request_id: Any) -> Dict[str, Any]:
    oid = parse_object_id(request_id, "Job request")
    request = await db[JOB_REQUESTS].find_one({"_id": oid})
    if request is None:
        raise NotFoundError("Job request not found")
    return request


async def find_pending(db: AsyncIOMotorDatabase, pair: Dict[str, ObjectId]) -> Optional[Dict[str, Any]]:
    return await db[JOB_REQUESTS].find_one(
        {**pair, "status": JobRequestStatus.PENDING.value}, projection={"_id": True}
    )


async def create_job_request(
    db: AsyncIOMotorDatabase, employer: CurrentAccount, fields: Dict[str, Any]
) -> Dict[str, Any]:
    """Send a pending request from ``employer`` to an available developer."""
    developer_id = parse_object_id(fields.pop("developer_id"), "Developer")
    developer = await db[DEVELOPERS].find_one({"_id": developer_id}, projection={"is_available": True})
    if developer is None:
        raise NotFoundError("Developer not found")
    if not developer.get("is_available", True):
        raise InvalidStateError("Developer is not available for work")

    pair = {"employer_id": employer.id, "developer_id": developer_id}
    if await find_pending(db, pair) is not None:
        raise ConflictError(DUPLICATE_PENDING)

    now = utcnow()
    doc = {
        **fields,
        **pair,
        "status": JobRequestStatus.PENDING.value,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = await db[JOB_REQUESTS].insert_one(doc)
    except DuplicateKeyError:
        # Lost the race against a concurrent create for the same pair
        raise ConflictError(DUPLICATE_PENDING)
    doc["_id"] = result.inserted_id

    logger.info(
        "job_request_created",
        job_request_id=str(doc["_id"]),
        employer_id=employer.id_str,
        developer_id=str(developer_id),
    )
    return await _attach_one(db, doc)


async def get_job_request(db: AsyncIOMotorDatabase, request_id: Any, account: CurrentAccount) -> Dict[str, Any]:
    request = await _load(db, request_id)
    if not account.is_admin:
        _check_party(request, account)
    return await _attach_one(db, request)


async def _apply(
    db: AsyncIOMotorDatabase,
    request: Dict[str, Any],
    account: CurrentAccount,
    changes: Dict[str, Any],
    status_change: bool,
) -> Dict[str, Any]:
    query: Dict[str, Any] = {"_id": request["_id"], owner_field(account.kind): account.id}
    if status_change:
        query["status"] = JobRequestStatus.PENDING.value

    updated = await db[JOB_REQUESTS].find_one_and_update(
        query,
        {"$set": {**changes, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        # Someone else moved it out of pending between our read and write
        current = await _load(db, request["_id"])
        raise InvalidStateError(
            f"Job request cannot be updated in its current status ({current.get('status')})"
        )
    return updated


async def transition(
    db: AsyncIOMotorDatabase,
    request_id: Any,
    account: CurrentAccount,
    target: JobRequestStatus,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """Move a pending request to ``target`` on behalf of the caller's side."""
    request = await _load(db, request_id)
    _check_party(request, account)
    check_transition(JobRequestStatus(request["status"]), target, account.kind)

    changes: Dict[str, Any] = {"status": target.value}
    if notes:
        changes[NOTES_FIELD[account.kind]] = notes

    updated = await _apply(db, request, account, changes, status_change=True)
    logger.info(
        "job_request_transitioned",
        job_request_id=str(request["_id"]),
        from_status=request["status"],
        to_status=target.value,
        by=account.kind.value,
    )
    return await _attach_one(db, updated)


async def update_job_request(
    db: AsyncIOMotorDatabase, request_id: Any, account: CurrentAccount, fields: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Partial update restricted to the fields the caller's side may write.

    Fields outside that set are rejected rather than dropped, so a client
    learns its change did not apply.
    """
    request = await _load(db, request_id)
    _check_party(request, account)

    forbidden = sorted(set(fields) - WRITABLE_FIELDS[account.kind])
    if forbidden:
        raise ValidationError(
            f"{account.kind.value} cannot update: {', '.join(forbidden)}",
            errors=forbidden,
        )

    changes = dict(fields)
    status = changes.pop("status", None)
    if status is not None:
        target = JobRequestStatus(status)
        check_transition(JobRequestStatus(request["status"]), target, account.kind)
        changes["status"] = target.value

    if not changes:
        return await _attach_one(db, request)

    updated = await _apply(db, request, account, changes, status_change=status is not None)
    logger.info(
        "job_request_updated",
        job_request_id=str(request["_id"]),
        by=account.kind.value,
        fields=sorted(changes),
    )
    return await _attach_one(db, updated)


async def delete_job_request(db: AsyncIOMotorDatabase, request_id: Any) -> None:
    oid = parse_object_id(request_id, "Job request")
    result = await db[JOB_REQUESTS].delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFoundError("Job request not found")
    logger.info("job_request_deleted", job_request_id=str(oid))


def scope_filter(account: CurrentAccount) -> Dict[str, ObjectId]:
    """Requests visible in the caller's own list."""
    if account.kind is AccountKind.DEVELOPER:
        return {"developer_id": account.id}
    return {"employer_id": account.id}


async def list_job_requests(
    db: AsyncIOMotorDatabase,
    account: CurrentAccount,
    page: PageParams,
    status: Optional[JobRequestStatus] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
):
    query: Dict[str, Any] = scope_filter(account)
    if status is not None:
        query["status"] = status.value

    collection = db[JOB_REQUESTS]
    cursor = (
        collection.find(query)
        .sort(sort_by, sort_direction(sort_order))
        .skip(page.skip)
        .limit(page.limit)
    )
    requests, total = await asyncio.gather(
        cursor.to_list(length=page.limit),
        collection.count_documents(query),
    )
    return await attach_parties(db, requests), total
