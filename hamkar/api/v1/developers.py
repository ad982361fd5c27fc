"""Developer profile endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.core.security import CurrentAccount, require_admin, require_kind, require_own_resource
from hamkar.db.base import to_str_id
from hamkar.db.session import get_db
from hamkar.models import developer as developer_model
from hamkar.models.account import AccountKind
from hamkar.schemas.account import AvailabilityUpdate, DeveloperProfileComplete, DeveloperUpdate
from hamkar.services import account_service
from hamkar.utils.helpers import PageParams, envelope, page_params, split_csv

router = APIRouter()

DEVELOPER = AccountKind.DEVELOPER


@router.get("")
async def list_developers(
    page: PageParams = Depends(page_params),
    skills: Optional[str] = Query(None, description="Comma-separated skills, any of"),
    city: Optional[str] = None,
    is_available: Optional[bool] = None,
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Public developer directory."""
    developers, total = await account_service.list_developers(
        db, page, skills=split_csv(skills), city=city, is_available=is_available
    )
    return envelope(data=[to_str_id(doc) for doc in developers], pagination=page.pagination(total))


@router.get("/profile")
async def get_own_profile(
    current_account: CurrentAccount = Depends(require_kind(DEVELOPER)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    profile = await account_service.get_developer_with_projects(db, current_account.id, include_private=True)
    return envelope(data=to_str_id(profile))


@router.put("/profile")
async def update_own_profile(
    body: DeveloperUpdate,
    current_account: CurrentAccount = Depends(require_kind(DEVELOPER)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = await account_service.update_account(
        db, DEVELOPER, current_account.id, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return envelope(data=to_str_id(developer_model.public_profile(doc)), message="Profile updated successfully")


@router.post("/profile/complete")
async def complete_profile(
    body: DeveloperProfileComplete,
    current_account: CurrentAccount = Depends(require_kind(DEVELOPER)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Fill in the profile fields collected after signup."""
    doc = await account_service.update_account(
        db, DEVELOPER, current_account.id, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return envelope(data=to_str_id(developer_model.public_profile(doc)), message="Profile completed successfully")


@router.patch("/profile/availability")
async def update_availability(
    body: AvailabilityUpdate,
    current_account: CurrentAccount = Depends(require_kind(DEVELOPER)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = await account_service.update_account(
        db, DEVELOPER, current_account.id, {"is_available": body.is_available}
    )
    state = "available" if doc.get("is_available") else "unavailable"
    return envelope(
        data={"is_available": doc.get("is_available")},
        message=f"Availability updated: you are now {state}",
    )


@router.get("/{id}")
async def get_developer(id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Public profile with public projects."""
    profile = await account_service.get_developer_with_projects(db, id)
    return envelope(data=to_str_id(profile))


@router.put("/{id}")
async def update_developer(
    id: str,
    body: DeveloperUpdate,
    current_account: CurrentAccount = Depends(require_own_resource("id")),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = await account_service.update_account(
        db, DEVELOPER, id, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return envelope(data=to_str_id(developer_model.public_profile(doc)), message="Developer updated successfully")


@router.delete("/{id}")
async def delete_developer(
    id: str,
    current_account: CurrentAccount = Depends(require_admin()),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    await account_service.delete_account(db, DEVELOPER, id)
    return envelope(message="Developer deleted successfully")
