"""Employer profile endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.core.security import CurrentAccount, require_admin, require_kind, require_own_resource
from hamkar.db.base import to_str_id
from hamkar.db.session import get_db
from hamkar.models import employer as employer_model
from hamkar.models.account import AccountKind
from hamkar.schemas.account import EmployerUpdate
from hamkar.services import account_service
from hamkar.utils.helpers import PageParams, envelope, page_params

router = APIRouter()

EMPLOYER = AccountKind.EMPLOYER


@router.get("")
async def list_employers(
    page: PageParams = Depends(page_params),
    industry: Optional[str] = None,
    city: Optional[str] = None,
    company_size: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    employers, total = await account_service.list_employers(
        db, page, industry=industry, city=city, company_size=company_size
    )
    return envelope(data=[to_str_id(doc) for doc in employers], pagination=page.pagination(total))


@router.get("/profile")
async def get_own_profile(current_account: CurrentAccount = Depends(require_kind(EMPLOYER))):
    return envelope(data=to_str_id(employer_model.public_profile(current_account.document)))


@router.put("/profile")
async def update_own_profile(
    body: EmployerUpdate,
    current_account: CurrentAccount = Depends(require_kind(EMPLOYER)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = await account_service.update_account(
        db, EMPLOYER, current_account.id, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return envelope(data=to_str_id(employer_model.public_profile(doc)), message="Profile updated successfully")


@router.get("/{id}")
async def get_employer(id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    doc = await account_service.get_account(db, EMPLOYER, id)
    return envelope(data=to_str_id(employer_model.public_profile(doc)))


@router.put("/{id}")
async def update_employer(
    id: str,
    body: EmployerUpdate,
    current_account: CurrentAccount = Depends(require_own_resource("id")),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = await account_service.update_account(
        db, EMPLOYER, id, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return envelope(data=to_str_id(employer_model.public_profile(doc)), message="Employer updated successfully")


@router.delete("/{id}")
async def delete_employer(
    id: str,
    current_account: CurrentAccount = Depends(require_admin()),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    await account_service.delete_account(db, EMPLOYER, id)
    return envelope(message="Employer deleted successfully")
