"""
Article schemas
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from harties.schemas.validators import check_url
from harties.utils.html import sanitize_html, sanitize_text


class ArticleStatus(str, Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    FEATURED = "featured"


class ScrapedArticle(BaseModel):
    """Structured content extracted from one article page"""
    title: str
    excerpt: str = ""
    content: str
    publish_date: str = Field(..., description="ISO-8601 timestamp")
    source_url: str
    featured_image: str
    author: Optional[str] = None


class ArticleCreate(BaseModel):
    """Row inserted into the articles table"""
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")
    excerpt: Optional[str] = Field(None, max_length=500)
    content: str = Field(..., min_length=1, max_length=50000)
    featured_image_url: Optional[str] = None
    author_id: UUID
    category_id: Optional[UUID] = None
    status: ArticleStatus = ArticleStatus.PUBLISHED
    views: int = 0
    published_at: str
    created_at: str
    updated_at: str

    @field_validator("title", "excerpt")
    @classmethod
    def clean_text(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_text(value) if value else value

    @field_validator("content", mode="before")
    @classmethod
    def clean_content(cls, value: str) -> str:
        return sanitize_html(value) if isinstance(value, str) else value

    @field_validator("featured_image_url")
    @classmethod
    def validate_image(cls, value: Optional[str]) -> Optional[str]:
        return check_url(value, "image URL")


class Article(BaseModel):
    """Row read back from the articles table"""
    id: str
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: Optional[str] = None
    featured_image_url: Optional[str] = None
    author_id: Optional[str] = None
    category_id: Optional[str] = None
    status: str = ArticleStatus.PUBLISHED.value
    views: int = 0
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")
