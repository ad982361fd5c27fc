"""Authentication endpoints."""

from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, Response, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.config import settings
from hamkar.core.security import CurrentAccount, create_access_token, get_current_account
from hamkar.db.base import to_str_id
from hamkar.db.session import get_db
from hamkar.models.account import AccountKind, Role
from hamkar.schemas.auth import (
    ChangePasswordRequest,
    DeveloperSignupRequest,
    EmployerSignupRequest,
    LoginRequest,
)
from hamkar.services import account_service
from hamkar.utils.helpers import envelope

logger = structlog.get_logger(__name__)

router = APIRouter()


def set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def _session_payload(kind: AccountKind, doc: Dict[str, Any]) -> Dict[str, Any]:
    role = Role(doc.get("role") or Role.for_kind(kind).value)
    token = create_access_token(str(doc["_id"]), kind, role)
    user = to_str_id(account_service.public_profile(kind, doc))
    user["user_type"] = kind.value
    return {"token": token, "user": user}


@router.post("/developer/signup", status_code=status.HTTP_201_CREATED)
async def developer_signup(
    body: DeveloperSignupRequest, response: Response, db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Register a new developer."""
    doc = await account_service.register(db, AccountKind.DEVELOPER, body.model_dump())
    payload = _session_payload(AccountKind.DEVELOPER, doc)
    set_token_cookie(response, payload["token"])
    return envelope(data=payload, message="Developer registered successfully")


@router.post("/employer/signup", status_code=status.HTTP_201_CREATED)
async def employer_signup(
    body: EmployerSignupRequest, response: Response, db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Register a new employer."""
    doc = await account_service.register(db, AccountKind.EMPLOYER, body.model_dump(exclude_none=True))
    payload = _session_payload(AccountKind.EMPLOYER, doc)
    set_token_cookie(response, payload["token"])
    return envelope(data=payload, message="Employer registered successfully")


@router.post("/login")
async def login(body: LoginRequest, response: Response, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Login with email, password and account type."""
    kind = AccountKind(body.user_type)
    doc = await account_service.authenticate(db, body.email, body.password, kind)
    payload = _session_payload(kind, doc)
    set_token_cookie(response, payload["token"])
    return envelope(data=payload, message="Login successful")


@router.get("/me")
async def me(current_account: CurrentAccount = Depends(get_current_account)):
    """Get the authenticated account."""
    user = to_str_id(account_service.public_profile(current_account.kind, current_account.document))
    user["user_type"] = current_account.kind.value
    return envelope(data={"user": user})


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    current_account: CurrentAccount = Depends(get_current_account),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    await account_service.change_password(db, current_account, body.current_password, body.new_password)
    return envelope(message="Password changed successfully")


@router.post("/logout")
async def logout(response: Response, current_account: CurrentAccount = Depends(get_current_account)):
    response.delete_cookie(settings.COOKIE_NAME, httponly=True, samesite="lax", secure=settings.is_production)
    logger.info("logged_out", account_id=current_account.id_str)
    return envelope(message="Logged out successfully")
