"""Authentication schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from hamkar.models.account import AccountKind
from hamkar.models.employer import COMPANY_SIZES
from hamkar.utils.validators import WebUrl


class RequestModel(BaseModel):
    """Base for request bodies: trimmed strings, unknown keys rejected."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid", use_enum_values=True)


class EmailMixin(RequestModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class DeveloperSignupRequest(EmailMixin):
    """Developer signup request schema."""

    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    password: str = Field(..., min_length=6, max_length=100)


class EmployerSignupRequest(EmailMixin):
    """Employer signup request schema."""

    company_name: str = Field(..., min_length=2, max_length=100)
    password: str = Field(..., min_length=6, max_length=100)
    phone: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
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


class LoginRequest(EmailMixin):
    """Login request schema."""

    password: str = Field(..., min_length=1)
    user_type: AccountKind


class ChangePasswordRequest(RequestModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=100)
