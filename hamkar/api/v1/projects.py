"""Project endpoints."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.core.security import CurrentAccount, get_optional_account, require_kind
from hamkar.db.base import to_str_id
from hamkar.db.session import get_db
from hamkar.models.account import AccountKind
from hamkar.schemas.project import ProjectCreate, ProjectUpdate
from hamkar.services import project_service
from hamkar.utils.helpers import PageParams, envelope, page_params, split_csv

router = APIRouter()

developer_only = require_kind(AccountKind.DEVELOPER)


@router.get("")
async def list_projects(
    page: PageParams = Depends(page_params),
    tech_stack: Optional[str] = None,
    developer_id: Optional[str] = None,
    sort_by: Literal["created_at", "updated_at", "title"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Public projects, newest first by default."""
    projects, total = await project_service.list_public_projects(
        db,
        page,
        tech_stack=split_csv(tech_stack),
        developer_id=developer_id,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return envelope(data=[to_str_id(p) for p in projects], pagination=page.pagination(total))


@router.get("/profile/my-projects")
async def my_projects(
    page: PageParams = Depends(page_params),
    current_account: CurrentAccount = Depends(developer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    projects, total = await project_service.list_own_projects(db, current_account, page)
    return envelope(data=[to_str_id(p) for p in projects], pagination=page.pagination(total))


@router.get("/developer/{developer_id}")
async def developer_projects(
    developer_id: str,
    page: PageParams = Depends(page_params),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    projects, total = await project_service.list_developer_projects(db, developer_id, page)
    return envelope(data=[to_str_id(p) for p in projects], pagination=page.pagination(total))


@router.get("/{id}")
async def get_project(
    id: str,
    current_account: Optional[CurrentAccount] = Depends(get_optional_account),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    project = await project_service.get_project(db, id, current_account)
    return envelope(data=to_str_id(project))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    current_account: CurrentAccount = Depends(developer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    project = await project_service.create_project(db, current_account, body.model_dump())
    return envelope(data=to_str_id(project), message="Project created successfully")


@router.put("/{id}")
async def update_project(
    id: str,
    body: ProjectUpdate,
    current_account: CurrentAccount = Depends(developer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    project = await project_service.update_project(
        db, id, current_account, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return envelope(data=to_str_id(project), message="Project updated successfully")


@router.delete("/{id}")
async def delete_project(
    id: str,
    current_account: CurrentAccount = Depends(developer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    await project_service.delete_project(db, id, current_account)
    return envelope(message="Project deleted successfully")
