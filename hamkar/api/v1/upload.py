"""File upload endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.core.security import CurrentAccount, get_current_account, require_kind
from hamkar.db.session import get_db
from hamkar.models.account import AccountKind
from hamkar.services import upload_service
from hamkar.utils.helpers import envelope

router = APIRouter()

developer_only = require_kind(AccountKind.DEVELOPER)
employer_only = require_kind(AccountKind.EMPLOYER)


@router.post("/resume")
async def upload_resume(
    resume: Optional[UploadFile] = File(None),
    current_account: CurrentAccount = Depends(developer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Upload a PDF resume (max 5MB) and record it on the profile."""
    stored = await upload_service.upload_single(db, current_account, "resume", resume)
    return envelope(data=stored, message="Resume uploaded successfully")


@router.post("/profile-picture")
async def upload_profile_picture(
    profile_picture: Optional[UploadFile] = File(None),
    current_account: CurrentAccount = Depends(developer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    stored = await upload_service.upload_single(db, current_account, "profile_picture", profile_picture)
    return envelope(data=stored, message="Profile picture uploaded successfully")


@router.post("/company-logo")
async def upload_company_logo(
    company_logo: Optional[UploadFile] = File(None),
    current_account: CurrentAccount = Depends(employer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    stored = await upload_service.upload_single(db, current_account, "company_logo", company_logo)
    return envelope(data=stored, message="Company logo uploaded successfully")


@router.post("/project-image")
async def upload_project_image(
    project_image: Optional[UploadFile] = File(None),
    current_account: CurrentAccount = Depends(developer_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    stored = await upload_service.upload_single(db, current_account, "project_image", project_image)
    return envelope(data=stored, message="Project image uploaded successfully")


@router.post("/multiple")
async def upload_multiple(
    files: Optional[List[UploadFile]] = File(None),
    current_account: CurrentAccount = Depends(get_current_account),
):
    stored = await upload_service.upload_multiple(current_account, files)
    return envelope(data=stored, message=f"{len(stored)} file(s) uploaded successfully")


@router.get("/files")
async def list_files(current_account: CurrentAccount = Depends(get_current_account)):
    return envelope(data=upload_service.owned_files(current_account))


@router.delete("/files/{filename}")
async def delete_file(
    filename: str,
    current_account: CurrentAccount = Depends(get_current_account),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    await upload_service.delete_file(db, current_account, filename)
    return envelope(message="File deleted successfully")
