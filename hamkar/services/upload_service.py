"""Disk-backed file uploads."""

import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

import structlog
from fastapi import UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.config import settings
from hamkar.core.exceptions import ForbiddenError, NotFoundError, PayloadTooLargeError, ValidationError
from hamkar.core.security import CurrentAccount
from hamkar.db.base import utcnow
from hamkar.models.account import AccountKind
from hamkar.utils.validators import validate_filename

logger = structlog.get_logger(__name__)

# Stored extension is derived from the checked content type, never the client name
EXTENSIONS: Dict[str, str] = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

PDF_TYPES = frozenset({"application/pdf"})
IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})

URL_PREFIX = "/uploads"


@dataclass(frozen=True)
class UploadField:
    name: str
    subdir: str
    mime_types: FrozenSet[str]
    # Account attribute the file URL is recorded on, if any
    owner_kind: Optional[AccountKind] = None
    owner_attribute: Optional[str] = None


UPLOAD_FIELDS: Dict[str, UploadField] = {
    "resume": UploadField("resume", "resumes", PDF_TYPES, AccountKind.DEVELOPER, "resume_url"),
    "profile_picture": UploadField(
        "profile_picture", "profile-pictures", IMAGE_TYPES, AccountKind.DEVELOPER, "profile_picture"
    ),
    "company_logo": UploadField(
        "company_logo", "company-logos", IMAGE_TYPES, AccountKind.EMPLOYER, "company_logo"
    ),
    "project_image": UploadField("project_image", "project-images", IMAGE_TYPES),
    "files": UploadField("files", "misc", PDF_TYPES | IMAGE_TYPES),
}

SUBDIRS = tuple(field.subdir for field in UPLOAD_FIELDS.values())


def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def ensure_upload_dirs() -> None:
    for subdir in SUBDIRS:
        (upload_root() / subdir).mkdir(parents=True, exist_ok=True)


def generate_filename(field: str, content_type: Optional[str]) -> str:
    """``<field>-<epoch ms>-<random><ext>``, with ``<ext>`` taken from ``content_type``."""
    ext = EXTENSIONS.get(content_type or "", "")
    return f"{field}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


def file_url(subdir: str, filename: str) -> str:
    return f"{URL_PREFIX}/{subdir}/{filename}"


def _path_for_url(url: str) -> Optional[Path]:
    prefix = URL_PREFIX + "/"
    if not url or not url.startswith(prefix):
        return None
    return upload_root() / url[len(prefix):]


def check_content_type(field: UploadField, content_type: Optional[str]) -> None:
    if content_type not in field.mime_types:
        raise ValidationError(
            f"Invalid file type for {field.name}. Allowed types: {', '.join(sorted(field.mime_types))}"
        )


async def store_file(field: UploadField, upload: UploadFile) -> Dict[str, Any]:
    """Validate and write one upload; returns its metadata."""
    check_content_type(field, upload.content_type)

    # One byte past the limit is enough to know it is too large
    content = await upload.read(settings.MAX_FILE_SIZE + 1)
    if len(content) > settings.MAX_FILE_SIZE:
        raise PayloadTooLargeError(
            f"File too large. Maximum size is {settings.MAX_FILE_SIZE // (1024 * 1024)}MB"
        )

    directory = upload_root() / field.subdir
    directory.mkdir(parents=True, exist_ok=True)
    filename = generate_filename(field.name, upload.content_type)
    with open(directory / filename, "wb") as f:
        f.write(content)

    return {
        "filename": filename,
        "filepath": file_url(field.subdir, filename),
        "size": len(content),
        "mimetype": upload.content_type,
        "original_name": upload.filename,
    }


def _remove(url: Optional[str]) -> None:
    path = _path_for_url(url) if url else None
    if path is not None:
        path.unlink(missing_ok=True)


async def upload_single(
    db: AsyncIOMotorDatabase, account: CurrentAccount, field_name: str, upload: Optional[UploadFile]
) -> Dict[str, Any]:
    """Store one file and record its URL on the caller's account when the field has an owner attribute."""
    if upload is None or not upload.filename:
        raise ValidationError("No file uploaded")

    field = UPLOAD_FIELDS[field_name]
    stored = await store_file(field, upload)

    if field.owner_attribute and account.kind is field.owner_kind:
        previous = account.document.get(field.owner_attribute)
        await db[account.kind.collection].update_one(
            {"_id": account.id},
            {"$set": {field.owner_attribute: stored["filepath"], "updated_at": utcnow()}},
        )
        if previous and previous != stored["filepath"]:
            _remove(previous)

    logger.info(
        "file_uploaded",
        field=field.name,
        filename=stored["filename"],
        size=stored["size"],
        account_id=account.id_str,
    )
    return stored


async def upload_multiple(account: CurrentAccount, uploads: List[UploadFile]) -> List[Dict[str, Any]]:
    uploads = [upload for upload in uploads or [] if upload.filename]
    if not uploads:
        raise ValidationError("No files uploaded")
    if len(uploads) > settings.MAX_FILES_PER_REQUEST:
        raise ValidationError(f"Too many files. Maximum is {settings.MAX_FILES_PER_REQUEST}")

    field = UPLOAD_FIELDS["files"]
    # Validate every type before writing anything
    for upload in uploads:
        check_content_type(field, upload.content_type)

    stored = [await store_file(field, upload) for upload in uploads]
    logger.info("files_uploaded", count=len(stored), account_id=account.id_str)
    return stored


def owned_files(account: CurrentAccount) -> List[Dict[str, Any]]:
    """Files recorded on the caller's account."""
    files = []
    for field in UPLOAD_FIELDS.values():
        if not field.owner_attribute or field.owner_kind is not account.kind:
            continue
        url = account.document.get(field.owner_attribute)
        if url:
            files.append(
                {
                    "type": field.name,
                    "filename": url.rsplit("/", 1)[-1],
                    "filepath": url,
                    "upload_date": account.document.get("updated_at"),
                }
            )
    return files


def find_file(filename: str) -> Optional[Path]:
    for subdir in SUBDIRS:
        candidate = upload_root() / subdir / filename
        if candidate.is_file():
            return candidate
    return None


async def delete_file(db: AsyncIOMotorDatabase, account: CurrentAccount, filename: str) -> None:
    if not validate_filename(filename):
        raise ValidationError("Invalid filename")

    path = find_file(filename)
    if path is None:
        raise NotFoundError("File not found")

    url = file_url(path.parent.name, path.name)
    owned = [
        field.owner_attribute
        for field in UPLOAD_FIELDS.values()
        if field.owner_attribute
        and field.owner_kind is account.kind
        and account.document.get(field.owner_attribute) == url
    ]
    if not owned and not account.is_admin:
        raise ForbiddenError("Access denied. You can only delete your own files.")

    path.unlink(missing_ok=True)
    if owned:
        await db[account.kind.collection].update_one(
            {"_id": account.id},
            {"$unset": {attribute: "" for attribute in owned}, "$set": {"updated_at": utcnow()}},
        )
    logger.info("file_deleted", filename=filename, account_id=account.id_str)
