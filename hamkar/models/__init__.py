"""Document models: enums, rules and pure helpers over stored documents."""

from hamkar.models.account import AccountKind, Role
from hamkar.models.job_request import JobRequestStatus, SalaryType

__all__ = [
    "AccountKind",
    "Role",
    "JobRequestStatus",
    "SalaryType",
]
