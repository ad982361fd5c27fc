"""Job request endpoints."""

from typing import Literal, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.core.exceptions import ValidationError
from hamkar.core.security import CurrentAccount, get_current_account, require_admin, require_kind
from hamkar.db.base import to_str_id
from hamkar.db.session import get_db
from hamkar.models.account import AccountKind
from hamkar.models.job_request import NOTES_FIELD, JobRequestStatus
from hamkar.schemas.job_request import JobRequestCreate, JobRequestDecision, JobRequestUpdate
from hamkar.services import job_request_service
from hamkar.utils.helpers import PageParams, envelope, page_params

router = APIRouter()

developer_only = require_kind(AccountKind.DEVELOPER)
employer_only = require_kind(AccountKind.EMPLOYER)
participant = require_kind(AccountKind.DEVELOPER, AccountKind.EMPLOYER)

SortField = Literal["created_at", "updated_at", "salary_offer", "status", "job_title"]


@router.get("")
async def list_job_requests(
    page: PageParams = Depends(page_params),
    status_filter: Optional[JobRequestStatus] = Query(None, alias="status"),
    sort_by: SortField = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    current_account: CurrentAccount = Depends(get_current_account),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Requests the caller sent (employer) or received (developer)."""
    requests, total = await job_request_service.list_job_requests(
        db, current_account, page, status=status_filter, sort_by=sort_by, sort_order=sort_order
    )
    return envelope(data=[to_str_id(r) for r in requests], pagination=page.pagination(total))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_job_request(
    body: JobRequestCreate,
    current_account: CurrentAccount = Depends(employer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    request = await job_request_service.create_job_request(db, current_account, body.model_dump(exclude_none=True))
    return envelope(data=to_str_id(request), message="Job request sent successfully")


@router.get("/{id}")
async def get_job_request(
    id: str,
    current_account: CurrentAccount = Depends(get_current_account),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    request = await job_request_service.get_job_request(db, id, current_account)
    return envelope(data=to_str_id(request))


@router.put("/{id}")
async def update_job_request(
    id: str,
    body: JobRequestUpdate,
    current_account: CurrentAccount = Depends(participant),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    request = await job_request_service.update_job_request(
        db, id, current_account, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return envelope(data=to_str_id(request), message="Job request updated successfully")


def decision_notes(account: CurrentAccount, body: Optional[JobRequestDecision]) -> Optional[str]:
    if body is None:
        return None
    own_field = NOTES_FIELD[account.kind]
    foreign = sorted(f for f in NOTES_FIELD.values() if f != own_field and getattr(body, f) is not None)
    if foreign:
        raise ValidationError(f"{account.kind.value} cannot update: {', '.join(foreign)}", errors=foreign)
    return getattr(body, own_field) or body.notes


async def _decide(db, id, account, target: JobRequestStatus, body: Optional[JobRequestDecision]):
    notes = decision_notes(account, body)
    request = await job_request_service.transition(db, id, account, target, notes=notes)
    return envelope(data=to_str_id(request), message=f"Job request {target.value} successfully")


@router.patch("/{id}/accept")
async def accept_job_request(
    id: str,
    body: Optional[JobRequestDecision] = Body(None),
    current_account: CurrentAccount = Depends(developer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await _decide(db, id, current_account, JobRequestStatus.ACCEPTED, body)


@router.patch("/{id}/reject")
async def reject_job_request(
    id: str,
    body: Optional[JobRequestDecision] = Body(None),
    current_account: CurrentAccount = Depends(developer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await _decide(db, id, current_account, JobRequestStatus.REJECTED, body)


@router.patch("/{id}/withdraw")
async def withdraw_job_request(
    id: str,
    body: Optional[JobRequestDecision] = Body(None),
    current_account: CurrentAccount = Depends(employer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await _decide(db, id, current_account, JobRequestStatus.WITHDRAWN, body)


@router.delete("/{id}")
async def delete_job_request(
    id: str,
    current_account: CurrentAccount = Depends(require_admin()),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    await job_request_service.delete_job_request(db, id)
    return envelope(message="Job request deleted successfully")
