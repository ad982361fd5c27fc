"""Developer and employer accounts: registration, credentials and profiles."""

import asyncio
from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from hamkar.core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from hamkar.core.security import (
    CurrentAccount,
    burn_password_check,
    get_password_hash,
    verify_password,
)
from hamkar.db.base import PROJECTS, parse_object_id, utcnow
from hamkar.models import developer as developer_model
from hamkar.models import employer as employer_model
from hamkar.models.account import AccountKind, Role
from hamkar.utils.helpers import PageParams, contains_pattern

logger = structlog.get_logger(__name__)

NO_PASSWORD = {"password_hash": False}
INVALID_CREDENTIALS = "Invalid credentials"

# Fields of an embedded project on a developer profile
PROJECT_PREVIEW_FIELDS = {
    "title": True,
    "description": True,
    "tech_stack": True,
    "demo_url": True,
    "image_url": True,
    "is_public": True,
    "created_at": True,
}


def public_profile(kind: AccountKind, doc: Dict[str, Any]) -> Dict[str, Any]:
    """Account document without credentials, with derived fields added."""
    if kind is AccountKind.DEVELOPER:
        return developer_model.public_profile(doc)
    return employer_model.public_profile(doc)


def _new_account_document(kind: AccountKind, fields: Dict[str, Any]) -> Dict[str, Any]:
    password = fields.pop("password")
    now = utcnow()
    doc = {
        **fields,
        "password_hash": get_password_hash(password),
        "role": Role.for_kind(kind).value,
        "created_at": now,
        "updated_at": now,
    }
    if kind is AccountKind.DEVELOPER:
        doc.setdefault("skills", [])
        doc.setdefault("projects", [])
        doc.setdefault("is_available", True)
    return doc


async def register(db: AsyncIOMotorDatabase, kind: AccountKind, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Create an account of ``kind``; emails are unique per kind."""
    collection = db[kind.collection]
    conflict = ConflictError(f"{kind.value} with this email already exists")

    if await collection.find_one({"email": fields["email"]}, projection={"_id": True}):
        raise conflict

    doc = _new_account_document(kind, dict(fields))
    try:
        result = await collection.insert_one(doc)
    except DuplicateKeyError:
        raise conflict

    doc["_id"] = result.inserted_id
    logger.info("account_registered", kind=kind.value, account_id=str(doc["_id"]))
    return doc


async def authenticate(
    db: AsyncIOMotorDatabase, email: str, password: str, kind: AccountKind
) -> Dict[str, Any]:
    """Return the account for valid credentials; the same error otherwise."""
    doc = await db[kind.collection].find_one({"email": email.strip().lower()})
    if doc is None:
        burn_password_check(password)
        logger.info("login_failed", kind=kind.value)
        raise UnauthorizedError(INVALID_CREDENTIALS, reason=UnauthorizedError.INVALID_CREDENTIALS)

    if not verify_password(password, doc.get("password_hash")):
        logger.info("login_failed", kind=kind.value)
        raise UnauthorizedError(INVALID_CREDENTIALS, reason=UnauthorizedError.INVALID_CREDENTIALS)

    logger.info("login_succeeded", kind=kind.value, account_id=str(doc["_id"]))
    return doc


async def change_password(
    db: AsyncIOMotorDatabase, account: CurrentAccount, current_password: str, new_password: str
) -> None:
    collection = db[account.kind.collection]
    doc = await collection.find_one({"_id": account.id}, projection={"password_hash": True})
    if doc is None:
        raise NotFoundError(f"{account.kind.value} not found")

    if not verify_password(current_password, doc.get("password_hash")):
        raise ValidationError("Current password is incorrect")

    await collection.update_one(
        {"_id": account.id},
        {"$set": {"password_hash": get_password_hash(new_password), "updated_at": utcnow()}},
    )
    logger.info("password_changed", kind=account.kind.value, account_id=account.id_str)


async def get_account(db: AsyncIOMotorDatabase, kind: AccountKind, account_id: Any) -> Dict[str, Any]:
    oid = parse_object_id(account_id, kind.value)
    doc = await db[kind.collection].find_one({"_id": oid}, projection=NO_PASSWORD)
    if doc is None:
        raise NotFoundError(f"{kind.value} not found")
    return doc


async def get_developer_with_projects(
    db: AsyncIOMotorDatabase, developer_id: Any, include_private: bool = False
) -> Dict[str, Any]:
    """Developer profile with its projects embedded in list order."""
    doc = await get_account(db, AccountKind.DEVELOPER, developer_id)
    project_ids: List[ObjectId] = doc.get("projects") or []

    query: Dict[str, Any] = {"_id": {"$in": project_ids}}
    if not include_private:
        query["is_public"] = True
    projects = await db[PROJECTS].find(query, projection=PROJECT_PREVIEW_FIELDS).to_list(length=None)
    by_id = {project["_id"]: project for project in projects}

    profile = developer_model.public_profile(doc)
    profile["projects"] = [by_id[pid] for pid in project_ids if pid in by_id]
    return profile


async def update_account(
    db: AsyncIOMotorDatabase, kind: AccountKind, account_id: Any, fields: Dict[str, Any]
) -> Dict[str, Any]:
    """Partial update of profile fields; returns the updated document."""
    oid = parse_object_id(account_id, kind.value)
    doc = await db[kind.collection].find_one_and_update(
        {"_id": oid},
        {"$set": {**fields, "updated_at": utcnow()}},
        projection=NO_PASSWORD,
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise NotFoundError(f"{kind.value} not found")
    logger.info("account_updated", kind=kind.value, account_id=str(oid), fields=sorted(fields))
    return doc


async def delete_account(db: AsyncIOMotorDatabase, kind: AccountKind, account_id: Any) -> None:
    """Hard delete. Projects and job requests referencing the account are kept."""
    oid = parse_object_id(account_id, kind.value)
    result = await db[kind.collection].delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFoundError(f"{kind.value} not found")
    logger.info("account_deleted", kind=kind.value, account_id=str(oid))


async def _list(
    db: AsyncIOMotorDatabase, kind: AccountKind, query: Dict[str, Any], page: PageParams
):
    collection = db[kind.collection]
    cursor = (
        collection.find(query, projection=NO_PASSWORD)
        .sort("created_at", -1)
        .skip(page.skip)
        .limit(page.limit)
    )
    docs, total = await asyncio.gather(
        cursor.to_list(length=page.limit),
        collection.count_documents(query),
    )
    return [public_profile(kind, doc) for doc in docs], total


async def list_developers(
    db: AsyncIOMotorDatabase,
    page: PageParams,
    skills: Optional[List[str]] = None,
    city: Optional[str] = None,
    is_available: Optional[bool] = None,
):
    """Public developer directory; only available developers unless asked otherwise."""
    query: Dict[str, Any] = {"is_available": True if is_available is None else is_available}
    if skills:
        query["skills"] = {"$in": skills}
    if city:
        query["city"] = contains_pattern(city)
    return await _list(db, AccountKind.DEVELOPER, query, page)


async def list_employers(
    db: AsyncIOMotorDatabase,
    page: PageParams,
    industry: Optional[str] = None,
    city: Optional[str] = None,
    company_size: Optional[str] = None,
):
    query: Dict[str, Any] = {}
    if industry:
        query["industry"] = contains_pattern(industry)
    if city:
        query["city"] = contains_pattern(city)
    if company_size:
        query["company_size"] = company_size
    return await _list(db, AccountKind.EMPLOYER, query, page)
