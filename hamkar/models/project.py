"""Project document helpers."""

from typing import Any, Dict, Optional

from bson import ObjectId

SORT_FIELDS = ("created_at", "updated_at", "title")


def is_owner(doc: Dict[str, Any], account_id: Optional[ObjectId]) -> bool:
    return account_id is not None and doc.get("developer_id") == account_id


def can_view(doc: Dict[str, Any], account_id: Optional[ObjectId], is_admin: bool = False) -> bool:
    """Private projects are visible to their owner and admins only."""
    return bool(doc.get("is_public", True)) or is_admin or is_owner(doc, account_id)
