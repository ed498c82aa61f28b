"""
News article and category models with their Pydantic schemas
"""

import enum
import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator
from sqlalchemy import JSON, Boolean, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, BaseModel, BaseSchema, utc_now_naive

MAX_TAGS = 10
MAX_TAG_LENGTH = 50
FORBIDDEN_TITLE_CHARACTERS = set("<>'\"")


class NewsStatus(str, enum.Enum):
    """Publication state of an article"""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"

    @classmethod
    def get_descriptions(cls) -> Dict[str, str]:
        """Get human-readable descriptions for statuses"""
        return {
            cls.DRAFT: "Work in progress, hidden from the public site",
            cls.PUBLISHED: "Visible on the public site",
            cls.ARCHIVED: "Withdrawn from the public site, kept for reference",
        }


news_status_enum = SAEnum(
    NewsStatus,
    name="news_status",
    native_enum=False,
    length=20,
    values_callable=lambda members: [member.value for member in members],
)

# TEXT[] on PostgreSQL, JSON list elsewhere (SQLite in tests)
tags_type = ARRAY(String(MAX_TAG_LENGTH)).with_variant(JSON(), "sqlite")


class NewsArticle(BaseModel):
    """News article published on the school site"""
    __tablename__ = "news"

    title: Mapped[str] = mapped_column(String(255), nullable=False, comment="Article title")
    slug: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        comment="URL-safe unique identifier derived from the title"
    )
    content: Mapped[str] = mapped_column(Text, nullable=False, comment="Rich text body")
    excerpt: Mapped[Optional[str]] = mapped_column(Text, comment="Plain-text summary")
    featured_image: Mapped[Optional[str]] = mapped_column(
        String(500),
        comment="Public path of the stored featured image"
    )
    author_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="User who created the article"
    )
    author_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        comment="Author username captured at creation time"
    )
    category: Mapped[str] = mapped_column(
        String(100),
        default="umum",
        nullable=False,
        comment="Category slug (joined informally to news_categories.slug)"
    )
    tags: Mapped[List[str]] = mapped_column(tags_type, default=list, nullable=False)
    status: Mapped[NewsStatus] = mapped_column(
        news_status_enum,
        default=NewsStatus.DRAFT,
        nullable=False,
    )
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True,
        comment="First time the article entered the published state"
    )

    author: Mapped[Optional["User"]] = relationship("User", back_populates="articles")  # noqa: F821

    __table_args__ = (
        Index('idx_news_status', 'status'),
        Index('idx_news_category', 'category'),
        Index('idx_news_published_at', 'published_at'),
        Index('idx_news_author_id', 'author_id'),
        Index('idx_news_featured', 'is_featured'),
    )

    @property
    def is_published(self) -> bool:
        return self.status == NewsStatus.PUBLISHED

    def __repr__(self) -> str:
        return f"<NewsArticle(id={self.id}, slug={self.slug}, status={self.status})>"


class NewsCategory(Base):
    """Reference list of article categories"""
    __tablename__ = "news_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    color: Mapped[str] = mapped_column(String(7), default="#007bff", nullable=False, comment="Hex display colour")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, nullable=False)

    def __repr__(self) -> str:
        return f"<NewsCategory(slug={self.slug})>"


def parse_tags(value: Any) -> Any:
    """Accept a list, a JSON array string or a comma-separated string."""
    if value is None or isinstance(value, list):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return []
        if raw.startswith("["):
            try:
                decoded = json.loads(raw)
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, list):
                return decoded
        return [tag.strip() for tag in raw.split(",") if tag.strip()]
    return value


# Pydantic Schemas
class _NewsFieldRules(BaseSchema):
    """Field validators shared by create and update payloads"""

    @field_validator('title', check_fields=False)
    @classmethod
    def validate_title(cls, v):
        if v is not None and FORBIDDEN_TITLE_CHARACTERS.intersection(v):
            raise ValueError('Title contains invalid characters')
        return v

    @field_validator('excerpt', check_fields=False, mode='before')
    @classmethod
    def blank_excerpt_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('tags', check_fields=False, mode='before')
    @classmethod
    def split_tags(cls, v):
        return parse_tags(v)

    @field_validator('tags', check_fields=False)
    @classmethod
    def validate_tags(cls, v):
        if v is None:
            return v
        if len(v) > MAX_TAGS:
            raise ValueError(f'Maximum {MAX_TAGS} tags allowed')
        if any(len(tag) > MAX_TAG_LENGTH for tag in v):
            raise ValueError(f'Each tag must not exceed {MAX_TAG_LENGTH} characters')
        return v


class NewsCreateSchema(_NewsFieldRules):
    """Schema for creating articles"""

    title: str = Field(..., min_length=5, max_length=255, description="Article title")
    content: str = Field(..., min_length=10, description="Rich text body")
    category: str = Field(..., min_length=1, max_length=100, description="Category slug")
    excerpt: Optional[str] = Field(None, max_length=500, description="Plain-text summary")
    status: NewsStatus = Field(NewsStatus.DRAFT, description="Publication state")
    tags: List[str] = Field(default_factory=list, description="Display tags")
    is_featured: bool = Field(False, description="Editorial highlight flag")


class NewsUpdateSchema(_NewsFieldRules):
    """Schema for partial article updates; unset fields keep their value"""

    title: Optional[str] = Field(None, min_length=5, max_length=255)
    content: Optional[str] = Field(None, min_length=10)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    excerpt: Optional[str] = Field(None, max_length=500)
    status: Optional[NewsStatus] = None
    tags: Optional[List[str]] = None
    is_featured: Optional[bool] = None


class NewsStatusUpdateSchema(BaseSchema):
    """Body of the explicit status change endpoint"""

    status: NewsStatus


class NewsCategorySchema(BaseSchema):
    """Category with the number of published articles"""

    id: int
    name: str
    slug: str
    description: Optional[str] = None
    color: str
    created_at: Optional[datetime] = None
    news_count: int = 0
