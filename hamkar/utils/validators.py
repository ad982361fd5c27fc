"""Validators."""

import re
from typing import Annotated, List, Optional

from pydantic import AfterValidator

_URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)


def validate_url(url: str) -> bool:
    """Validate absolute http(s) URL format."""
    return bool(_URL_PATTERN.match(url))


def check_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not validate_url(value):
        raise ValueError("Please enter a valid URL")
    return value


def check_string_list(values: Optional[List[str]]) -> Optional[List[str]]:
    """Strip items and drop blanks/duplicates while keeping order."""
    if values is None:
        return values
    cleaned: List[str] = []
    for item in values:
        item = item.strip()
        if item and item not in cleaned:
            cleaned.append(item)
    return cleaned


def validate_filename(filename: str) -> bool:
    """Reject names that could escape the upload directory."""
    if not filename or filename in (".", ".."):
        return False
    return "/" not in filename and "\\" not in filename and "\x00" not in filename


def check_non_empty_list(values: Optional[List[str]]) -> Optional[List[str]]:
    values = check_string_list(values)
    if values is not None and not values:
        raise ValueError("At least one item is required")
    return values


WebUrl = Annotated[str, AfterValidator(check_url)]
StringList = Annotated[List[str], AfterValidator(check_string_list)]
NonEmptyStringList = Annotated[List[str], AfterValidator(check_non_empty_list)]
