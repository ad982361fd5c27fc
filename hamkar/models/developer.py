"""Developer document helpers."""

from typing import Any, Dict

from hamkar.models.account import completion_percentage, strip_sensitive

REQUIRED_PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "city",
    "skills",
    "experience_years",
)
OPTIONAL_PROFILE_FIELDS = ("github_url", "portfolio_url", "resume_url", "profile_picture")
PROFILE_COMPLETE_THRESHOLD = 80

# Fields shown when a developer is embedded in another resource
SUMMARY_FIELDS = ("first_name", "last_name", "city", "skills", "experience_years")


def full_name(doc: Dict[str, Any]) -> str:
    return f"{doc.get('first_name', '')} {doc.get('last_name', '')}".strip()


def profile_completion(doc: Dict[str, Any]) -> int:
    return completion_percentage(doc, REQUIRED_PROFILE_FIELDS + OPTIONAL_PROFILE_FIELDS)


def is_profile_complete(doc: Dict[str, Any]) -> bool:
    return profile_completion(doc) >= PROFILE_COMPLETE_THRESHOLD


def public_profile(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Developer document without credentials, plus derived fields."""
    profile = strip_sensitive(doc)
    profile["full_name"] = full_name(doc)
    profile["total_projects"] = len(doc.get("projects") or [])
    profile["profile_completion"] = profile_completion(doc)
    profile["is_profile_complete"] = is_profile_complete(doc)
    return profile


def summary(doc: Dict[str, Any]) -> Dict[str, Any]:
    data = {"_id": doc["_id"], "full_name": full_name(doc)}
    for field in SUMMARY_FIELDS:
        data[field] = doc.get(field)
    return data
