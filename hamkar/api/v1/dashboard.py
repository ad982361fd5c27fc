"""Dashboard endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.core.security import CurrentAccount, get_current_account, require_admin, require_kind
from hamkar.db.session import get_db
from hamkar.models.account import AccountKind
from hamkar.services import dashboard_service
from hamkar.utils.helpers import envelope

router = APIRouter()


@router.get("/developer")
async def developer_dashboard(
    current_account: CurrentAccount = Depends(require_kind(AccountKind.DEVELOPER)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return envelope(data=await dashboard_service.developer_dashboard(db, current_account))


@router.get("/employer")
async def employer_dashboard(
    current_account: CurrentAccount = Depends(require_kind(AccountKind.EMPLOYER)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return envelope(data=await dashboard_service.employer_dashboard(db, current_account))


@router.get("/admin")
async def admin_dashboard(
    current_account: CurrentAccount = Depends(require_admin()),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Platform totals, latest sign-ups and the monthly job request histogram."""
    return envelope(data=await dashboard_service.admin_dashboard(db))


@router.get("/analytics")
async def analytics(
    period: Literal["week", "month", "year"] = "month",
    current_account: CurrentAccount = Depends(get_current_account),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return envelope(data=await dashboard_service.analytics(db, current_account, period))
