"""Security utilities: password hashing, JWT, RBAC dependencies."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any, Dict, Optional

import bcrypt
from bson import ObjectId
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.config import settings
from hamkar.core.exceptions import ForbiddenError, UnauthorizedError
from hamkar.db.base import parse_object_id
from hamkar.db.session import get_db
from hamkar.models.account import AccountKind, Role

# auto_error=False so the cookie transport can be tried when the header is absent
security = HTTPBearer(auto_error=False)

TOKEN_COOKIES = ("token", "access_token")

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


def _encode_password(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode_password(password), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode_password(plain_password), password_hash.encode("utf-8"))
    except ValueError:
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return get_password_hash("not-a-real-password")


def burn_password_check(plain_password: str) -> None:
    """Spend one hash comparison so unknown accounts take as long as bad passwords."""
    verify_password(plain_password, _dummy_hash())


def create_access_token(
    subject: str, kind: AccountKind, role: Role, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed JWT binding subject, account kind and role."""
    expire = datetime.utcnow() + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode = {
        "sub": subject,
        "kind": kind.value,
        "role": role.value,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired", reason=UnauthorizedError.TOKEN_EXPIRED)
    except JWTError:
        raise UnauthorizedError("Invalid token", reason=UnauthorizedError.INVALID_TOKEN)


@dataclass
class CurrentAccount:
    """Authenticated caller, threaded explicitly into handlers and services."""

    id: ObjectId
    kind: AccountKind
    role: Role
    document: Dict[str, Any]

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def id_str(self) -> str:
        return str(self.id)


def extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    """Bearer header takes precedence over cookies."""
    if credentials and credentials.credentials:
        return credentials.credentials
    for name in TOKEN_COOKIES:
        token = request.cookies.get(name)
        if token:
            return token
    return None


async def resolve_account(db: AsyncIOMotorDatabase, token: str) -> CurrentAccount:
    payload = decode_token(token)

    try:
        kind = AccountKind(payload.get("kind"))
    except ValueError:
        raise UnauthorizedError("Invalid user role", reason=UnauthorizedError.INVALID_TOKEN)

    subject = payload.get("sub")
    if subject is None or not ObjectId.is_valid(subject):
        raise UnauthorizedError("Invalid token", reason=UnauthorizedError.INVALID_TOKEN)

    document = await db[kind.collection].find_one(
        {"_id": ObjectId(subject)}, projection={"password_hash": False}
    )
    if document is None:
        raise UnauthorizedError("User not found")

    # Role comes from the stored record so promotions apply immediately
    role = Role(document.get("role") or Role.for_kind(kind).value)
    return CurrentAccount(id=document["_id"], kind=kind, role=role, document=document)


async def get_current_account(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> CurrentAccount:
    """Get current authenticated account from Bearer token or cookie."""
    token = extract_token(request, credentials)
    if not token:
        raise UnauthorizedError("Access token is required", reason=UnauthorizedError.MISSING_TOKEN)
    account = await resolve_account(db, token)
    request.state.account_id = account.id_str
    return account


async def get_optional_account(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> Optional[CurrentAccount]:
    """Current account if a valid token is present, None otherwise."""
    token = extract_token(request, credentials)
    if not token:
        return None
    try:
        return await resolve_account(db, token)
    except UnauthorizedError:
        return None


def require_role(*allowed_roles: Role):
    """Dependency to check the caller's role."""

    async def role_checker(
        current_account: CurrentAccount = Depends(get_current_account),
    ) -> CurrentAccount:
        if current_account.role not in allowed_roles:
            raise ForbiddenError("Access denied. Insufficient permissions.")
        return current_account

    return role_checker


def require_kind(*allowed_kinds: AccountKind):
    """Dependency to check the caller's account kind (admins included)."""

    async def kind_checker(
        current_account: CurrentAccount = Depends(get_current_account),
    ) -> CurrentAccount:
        if current_account.kind not in allowed_kinds:
            raise ForbiddenError("Access denied. Insufficient permissions.")
        return current_account

    return kind_checker


def require_admin():
    return require_role(Role.ADMIN)


def check_own_resource(current_account: CurrentAccount, owner_id: Any) -> None:
    """Raise ForbiddenError unless the caller owns the resource or is an admin."""
    if current_account.is_admin:
        return
    if str(owner_id) != current_account.id_str:
        raise ForbiddenError("Access denied. You can only access your own resources.")


def require_own_resource(param: str = "id"):
    """Dependency enforcing ownership of the account id named by path param ``param``."""

    async def owner_checker(
        request: Request,
        current_account: CurrentAccount = Depends(get_current_account),
    ) -> CurrentAccount:
        owner_id = parse_object_id(request.path_params.get(param))
        check_own_resource(current_account, owner_id)
        return current_account

    return owner_checker
