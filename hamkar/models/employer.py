"""Employer document helpers."""

from typing import Any, Dict

from hamkar.models.account import completion_percentage, strip_sensitive

COMPANY_SIZES = ("1-10", "11-50", "51-200", "201-500", "500+")

REQUIRED_PROFILE_FIELDS = ("company_name", "email", "phone", "city")
OPTIONAL_PROFILE_FIELDS = (
    "description",
    "website",
    "linkedin",
    "company_logo",
    "industry",
    "company_size",
)

SUMMARY_FIELDS = ("company_name", "city", "industry")


def profile_completion(doc: Dict[str, Any]) -> int:
    return completion_percentage(doc, REQUIRED_PROFILE_FIELDS + OPTIONAL_PROFILE_FIELDS)


def public_profile(doc: Dict[str, Any]) -> Dict[str, Any]:
    profile = strip_sensitive(doc)
    profile["profile_completion"] = profile_completion(doc)
    return profile


def summary(doc: Dict[str, Any]) -> Dict[str, Any]:
    data = {"_id": doc["_id"]}
    for field in SUMMARY_FIELDS:
        data[field] = doc.get(field)
    return data
