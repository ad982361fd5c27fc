"""Profile update schemas for developers and employers."""

from typing import Optional

from pydantic import Field, field_validator

from hamkar.models.employer import COMPANY_SIZES
from hamkar.schemas.auth import RequestModel
from hamkar.utils.validators import NonEmptyStringList, WebUrl


class DeveloperProfileFields(RequestModel):
    """Profile fields a developer fills in after signup."""

    phone: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    skills: Optional[NonEmptyStringList] = None
    experience_years: Optional[float] = Field(None, ge=0, le=50)
    github_url: Optional[WebUrl] = None
    portfolio_url: Optional[WebUrl] = None
    salary_expectation: Optional[float] = Field(None, ge=0)


class DeveloperProfileComplete(DeveloperProfileFields):
    pass


class DeveloperUpdate(DeveloperProfileFields):
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    is_available: Optional[bool] = None


class AvailabilityUpdate(RequestModel):
    is_available: bool


class EmployerUpdate(RequestModel):
    company_name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, max_length=1000)
    website: Optional[WebUrl] = None
    linkedin: Optional[WebUrl] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None

    @field_validator("company_size")
    @classmethod
    def validate_company_size(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in COMPANY_SIZES:
            raise ValueError(f"company_size must be one of: {', '.join(COMPANY_SIZES)}")
        return v
