"""Developer search schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from hamkar.schemas.auth import RequestModel
from hamkar.utils.validators import StringList


class RangeFilter(BaseModel):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_bounds(self):
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("min cannot be greater than max")
        return self

    @property
    def is_empty(self) -> bool:
        return self.min is None and self.max is None


class DeveloperSearchRequest(RequestModel):
    skills: Optional[StringList] = None
    city: Optional[str] = None
    experience_years: Optional[RangeFilter] = None
    salary_expectation: Optional[RangeFilter] = None
    is_available: bool = True
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sort_by: Literal["name", "experience_years", "created_at"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
