"""Job request statuses, transition rules and document helpers."""

from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from hamkar.core.exceptions import InvalidStateError
from hamkar.models.account import AccountKind


class JobRequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    @property
    def is_terminal(self) -> bool:
        return self is not JobRequestStatus.PENDING


class SalaryType(str, Enum):
    HOURLY = "hourly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# Target status -> the party allowed to move a pending request there
TRANSITIONS: Dict[JobRequestStatus, AccountKind] = {
    JobRequestStatus.ACCEPTED: AccountKind.DEVELOPER,
    JobRequestStatus.REJECTED: AccountKind.DEVELOPER,
    JobRequestStatus.WITHDRAWN: AccountKind.EMPLOYER,
}

# Fields each party may change through a generic update
WRITABLE_FIELDS: Dict[AccountKind, FrozenSet[str]] = {
    AccountKind.EMPLOYER: frozenset(
        {"interview_date", "interview_location", "interview_notes", "employer_notes", "status"}
    ),
    AccountKind.DEVELOPER: frozenset({"developer_notes", "status"}),
}

NOTES_FIELD: Dict[AccountKind, str] = {
    AccountKind.EMPLOYER: "employer_notes",
    AccountKind.DEVELOPER: "developer_notes",
}


def check_transition(
    current: JobRequestStatus, target: JobRequestStatus, party: AccountKind
) -> None:
    """Raise InvalidStateError unless ``party`` may move ``current`` to ``target``."""
    allowed_party = TRANSITIONS.get(target)
    if allowed_party is None or allowed_party is not party:
        raise InvalidStateError(
            f"{party.value} cannot set job request status to '{target.value}'"
        )
    if current.is_terminal:
        raise InvalidStateError(
            f"Job request cannot be {target.value} in its current status ({current.value})"
        )


def owner_field(party: AccountKind) -> str:
    if party is AccountKind.DEVELOPER:
        return "developer_id"
    return "employer_id"


def formatted_salary(doc: Dict[str, Any]) -> Optional[str]:
    salary = doc.get("salary_offer")
    if salary is None:
        return None
    return f"${salary:,.0f}"


def has_interview_scheduled(doc: Dict[str, Any]) -> bool:
    return bool(doc.get("interview_date")) and doc.get("status") == JobRequestStatus.ACCEPTED.value


def summary(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "_id": doc["_id"],
        "job_title": doc.get("job_title"),
        "salary_offer": formatted_salary(doc),
        "salary_type": doc.get("salary_type"),
        "status": doc.get("status"),
        "interview_date": doc.get("interview_date"),
        "has_interview_scheduled": has_interview_scheduled(doc),
        "created_at": doc.get("created_at"),
    }
