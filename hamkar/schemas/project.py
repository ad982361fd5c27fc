"""Project schemas."""

from typing import Optional

from pydantic import Field

from hamkar.schemas.auth import RequestModel
from hamkar.utils.validators import NonEmptyStringList, WebUrl


class ProjectCreate(RequestModel):
    title: str = Field(..., min_length=2, max_length=100)
    description: str = Field(..., min_length=10, max_length=2000)
    tech_stack: NonEmptyStringList
    demo_url: Optional[WebUrl] = None
    image_url: Optional[str] = None
    github_url: Optional[WebUrl] = None
    is_public: bool = True


class ProjectUpdate(RequestModel):
    title: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=2000)
    tech_stack: Optional[NonEmptyStringList] = None
    demo_url: Optional[WebUrl] = None
    image_url: Optional[str] = None
    github_url: Optional[WebUrl] = None
    is_public: Optional[bool] = None
