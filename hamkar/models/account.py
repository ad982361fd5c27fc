"""Account kinds, roles and the shared profile-completion helper."""

from enum import Enum
from typing import Any, Dict, Iterable

from hamkar.db.base import DEVELOPERS, EMPLOYERS


class AccountKind(str, Enum):
    """Identity namespace an account lives in."""

    DEVELOPER = "Developer"
    EMPLOYER = "Employer"

    @property
    def collection(self) -> str:
        if self is AccountKind.DEVELOPER:
            return DEVELOPERS
        return EMPLOYERS


class Role(str, Enum):
    """Authorization role carried by an account record."""

    DEVELOPER = "Developer"
    EMPLOYER = "Employer"
    ADMIN = "Admin"

    @classmethod
    def for_kind(cls, kind: AccountKind) -> "Role":
        """Default (non-admin) role of a new account of ``kind``."""
        if kind is AccountKind.DEVELOPER:
            return cls.DEVELOPER
        return cls.EMPLOYER


SENSITIVE_FIELDS = ("password_hash",)


def _has_value(v: Any) -> bool:
    """Generic truthy check that handles lists/dicts/strings consistently."""
    if v is None:
        return False
    if isinstance(v, bool):
        return True
    if isinstance(v, (list, dict)):
        return len(v) > 0
    if isinstance(v, str):
        return v.strip() != ""
    return True


def completion_percentage(doc: Dict[str, Any], fields: Iterable[str]) -> int:
    """Rounded share (0-100) of ``fields`` that hold a value in ``doc``."""
    fields = list(fields)
    if not fields:
        return 0
    filled = sum(1 for field in fields if _has_value(doc.get(field)))
    return int(round(filled / len(fields) * 100))


def strip_sensitive(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in doc.items() if key not in SENSITIVE_FIELDS}
