"""Helper utilities."""

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi import Query

from hamkar.config import settings
from hamkar.db.base import serialize


@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def pagination(self, total: int) -> Dict[str, int]:
        return paginate(self.page, self.limit, total)


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> PageParams:
    """Dependency for ``?page=&limit=`` query parameters."""
    return PageParams(page=page, limit=limit)


def paginate(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def envelope(
    data: Any = None,
    message: Optional[str] = None,
    pagination: Optional[Dict[str, int]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Build the ``{success, message?, data?, pagination?}`` response body."""
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = serialize(data)
    if pagination is not None:
        body["pagination"] = pagination
    for key, value in extra.items():
        body[key] = serialize(value)
    return body


def split_csv(value: Optional[str]) -> List[str]:
    """``"a, b,,c"`` -> ``["a", "b", "c"]``."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def contains_pattern(text: str) -> Dict[str, str]:
    """Case-insensitive substring match for a Mongo query."""
    return {"$regex": re.escape(text), "$options": "i"}


def sort_direction(order: str) -> int:
    return 1 if order == "asc" else -1
