"""Blog post models."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from utils.constants import MAX_BLOG_CONTENT_LENGTH, MAX_BLOG_TITLE_LENGTH
from utils.validation import sanitize_text


class Blog(BaseModel):
    """Blog post model."""

    id: Optional[str] = None
    title: str
    content: str = ""
    created_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        alias_generator = to_camel

    def to_public(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class BlogCreate(BaseModel):
    """Blog post creation model."""

    title: str = Field(..., min_length=1)
    content: str = ""

    @field_validator("title", mode="before")
    @classmethod
    def _clean_title(cls, value: Any) -> str:
        return sanitize_text(str(value or ""), max_length=MAX_BLOG_TITLE_LENGTH)

    @field_validator("content", mode="before")
    @classmethod
    def _clean_content(cls, value: Any) -> str:
        return sanitize_text(str(value or ""), max_length=MAX_BLOG_CONTENT_LENGTH)
