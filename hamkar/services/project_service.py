"""Developer-owned projects."""

import asyncio
from typing import Any, Dict, List, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from hamkar.core.exceptions import ForbiddenError, NotFoundError
from hamkar.core.security import CurrentAccount
from hamkar.db.base import DEVELOPERS, PROJECTS, parse_object_id, utcnow
from hamkar.db.session import transaction
from hamkar.models import developer as developer_model
from hamkar.models import project as project_model
from hamkar.utils.helpers import PageParams, sort_direction

logger = structlog.get_logger(__name__)


async def _attach_developers(db: AsyncIOMotorDatabase, projects: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Replace ``developer`` with a summary of the owning developer."""
    developer_ids = list({project["developer_id"] for project in projects})
    if not developer_ids:
        return projects
    developers = await db[DEVELOPERS].find(
        {"_id": {"$in": developer_ids}}, projection={"password_hash": False}
    ).to_list(length=None)
    by_id = {doc["_id"]: developer_model.summary(doc) for doc in developers}
    for project in projects:
        project["developer"] = by_id.get(project["developer_id"])
    return projects


async def _paginated(
    db: AsyncIOMotorDatabase,
    query: Dict[str, Any],
    page: PageParams,
    sort_by: str = "created_at",
    sort_order: str = "desc",
):
    collection = db[PROJECTS]
    cursor = (
        collection.find(query)
        .sort(sort_by, sort_direction(sort_order))
        .skip(page.skip)
        .limit(page.limit)
    )
    projects, total = await asyncio.gather(
        cursor.to_list(length=page.limit),
        collection.count_documents(query),
    )
    return projects, total


async def list_public_projects(
    db: AsyncIOMotorDatabase,
    page: PageParams,
    tech_stack: Optional[List[str]] = None,
    developer_id: Optional[str] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
):
    query: Dict[str, Any] = {"is_public": True}
    if tech_stack:
        query["tech_stack"] = {"$in": tech_stack}
    if developer_id:
        query["developer_id"] = parse_object_id(developer_id, "Developer")

    projects, total = await _paginated(db, query, page, sort_by, sort_order)
    return await _attach_developers(db, projects), total


async def list_developer_projects(db: AsyncIOMotorDatabase, developer_id: Any, page: PageParams):
    """Public projects of one developer."""
    oid = parse_object_id(developer_id, "Developer")
    if await db[DEVELOPERS].find_one({"_id": oid}, projection={"_id": True}) is None:
        raise NotFoundError("Developer not found")
    return await _paginated(db, {"developer_id": oid, "is_public": True}, page)


async def list_own_projects(db: AsyncIOMotorDatabase, account: CurrentAccount, page: PageParams):
    return await _paginated(db, {"developer_id": account.id}, page)


async def get_project(
    db: AsyncIOMotorDatabase, project_id: Any, account: Optional[CurrentAccount] = None
) -> Dict[str, Any]:
    oid = parse_object_id(project_id, "Project")
    project = await db[PROJECTS].find_one({"_id": oid})
    if project is None:
        raise NotFoundError("Project not found")

    account_id = account.id if account else None
    is_admin = account.is_admin if account else False
    if not project_model.can_view(project, account_id, is_admin):
        raise ForbiddenError("Access denied")

    (project,) = await _attach_developers(db, [project])
    return project


async def create_project(
    db: AsyncIOMotorDatabase, account: CurrentAccount, fields: Dict[str, Any]
) -> Dict[str, Any]:
    """Insert a project owned by ``account`` and record it on the developer."""
    now = utcnow()
    doc = {**fields, "developer_id": account.id, "created_at": now, "updated_at": now}

    async with transaction(db) as session:
        result = await db[PROJECTS].insert_one(doc, session=session)
        doc["_id"] = result.inserted_id
        await db[DEVELOPERS].update_one(
            {"_id": account.id},
            {"$addToSet": {"projects": doc["_id"]}, "$set": {"updated_at": now}},
            session=session,
        )

    logger.info("project_created", project_id=str(doc["_id"]), developer_id=account.id_str)
    (doc,) = await _attach_developers(db, [doc])
    return doc


async def _owned_project(db: AsyncIOMotorDatabase, project_id: Any, account: CurrentAccount, action: str):
    oid = parse_object_id(project_id, "Project")
    project = await db[PROJECTS].find_one({"_id": oid}, projection={"developer_id": True})
    if project is None:
        raise NotFoundError("Project not found")
    if not project_model.is_owner(project, account.id):
        raise ForbiddenError(f"Access denied. You can only {action} your own projects.")
    return oid


async def update_project(
    db: AsyncIOMotorDatabase, project_id: Any, account: CurrentAccount, fields: Dict[str, Any]
) -> Dict[str, Any]:
    oid = await _owned_project(db, project_id, account, "update")
    project = await db[PROJECTS].find_one_and_update(
        {"_id": oid, "developer_id": account.id},
        {"$set": {**fields, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if project is None:
        raise NotFoundError("Project not found")
    logger.info("project_updated", project_id=str(oid), fields=sorted(fields))
    (project,) = await _attach_developers(db, [project])
    return project


async def delete_project(db: AsyncIOMotorDatabase, project_id: Any, account: CurrentAccount) -> None:
    """Delete an owned project and drop it from the owner's project list."""
    oid = await _owned_project(db, project_id, account, "delete")

    async with transaction(db) as session:
        # Conditional on ownership; a concurrent delete leaves nothing to match
        deleted = await db[PROJECTS].find_one_and_delete(
            {"_id": oid, "developer_id": account.id}, session=session
        )
        if deleted is None:
            raise NotFoundError("Project not found")
        await db[DEVELOPERS].update_one(
            {"_id": account.id},
            {"$pull": {"projects": oid}, "$set": {"updated_at": utcnow()}},
            session=session,
        )

    logger.info("project_deleted", project_id=str(oid), developer_id=account.id_str)


async def count_projects(db: AsyncIOMotorDatabase, developer_id) -> Dict[str, int]:
    total, public = await asyncio.gather(
        db[PROJECTS].count_documents({"developer_id": developer_id}),
        db[PROJECTS].count_documents({"developer_id": developer_id, "is_public": True}),
    )
    return {"total_projects": total, "public_projects": public}
