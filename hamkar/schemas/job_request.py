"""Job request schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from hamkar.models.job_request import JobRequestStatus, SalaryType
from hamkar.schemas.auth import RequestModel


class JobRequestCreate(RequestModel):
    developer_id: str = Field(..., min_length=1)
    job_title: str = Field(..., min_length=2, max_length=100)
    job_description: Optional[str] = Field(None, max_length=2000)
    salary_offer: float = Field(..., ge=0)
    salary_type: SalaryType = Field(SalaryType.YEARLY, validate_default=True)
    interview_date: Optional[datetime] = None
    interview_location: Optional[str] = None
    interview_notes: Optional[str] = Field(None, max_length=500)


class JobRequestUpdate(RequestModel):
    """Generic update; which fields a caller may send depends on their side of the request."""

    status: Optional[JobRequestStatus] = None
    interview_date: Optional[datetime] = None
    interview_location: Optional[str] = None
    interview_notes: Optional[str] = Field(None, max_length=500)
    employer_notes: Optional[str] = Field(None, max_length=1000)
    developer_notes: Optional[str] = Field(None, max_length=1000)


class JobRequestDecision(RequestModel):
    """
    Body of accept/reject/withdraw; everything is optional.

    ``notes`` is stored on the caller's own notes field. ``developer_notes``
    and ``employer_notes`` are accepted as well, each from its own side only.
    """

    notes: Optional[str] = Field(None, max_length=1000)
    developer_notes: Optional[str] = Field(None, max_length=1000)
    employer_notes: Optional[str] = Field(None, max_length=1000)
