from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.models import NewsArticle, NewsCategory, Student
from school_portal.models.news import NewsStatus
from school_portal.utils.text import generate_excerpt, slugify


def utc_naive(year: int = 2024, month: int = 1, day: int = 1, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc).replace(tzinfo=None)


async def create_news(
    session: AsyncSession,
    *,
    title: str = "Pengumuman Libur Sekolah",
    content: str = "<p>Sekolah akan libur selama satu minggu penuh.</p>",
    category: str = "pengumuman",
    status: NewsStatus = NewsStatus.PUBLISHED,
    slug: Optional[str] = None,
    tags: Sequence[str] = (),
    is_featured: bool = False,
    view_count: int = 0,
    author_name: Optional[str] = "admin",
    featured_image: Optional[str] = None,
    published_at: Optional[datetime] = None,
    created_at: Optional[datetime] = None,
) -> NewsArticle:
    if published_at is None and status == NewsStatus.PUBLISHED:
        published_at = utc_naive()
    article = NewsArticle(
        title=title,
        slug=slug or slugify(title),
        content=content,
        excerpt=generate_excerpt(content),
        category=category,
        status=status,
        tags=list(tags),
        is_featured=is_featured,
        view_count=view_count,
        author_name=author_name,
        featured_image=featured_image,
        published_at=published_at,
    )
    if created_at is not None:
        article.created_at = created_at
        article.updated_at = created_at
    session.add(article)
    await session.commit()
    await session.refresh(article)
    return article


async def create_category(
    session: AsyncSession,
    *,
    name: str,
    slug: str,
    color: str = "#007bff",
) -> NewsCategory:
    category = NewsCategory(name=name, slug=slug, color=color)
    session.add(category)
    await session.commit()
    await session.refresh(category)
    return category


async def create_student(
    session: AsyncSession,
    *,
    name: str = "Ahmad Budi Santoso",
    nisn: str = "1234567890",
    class_name: str = "6A",
    is_graduated: bool = True,
    average_score: Optional[float] = 85.5,
    notes: Optional[str] = None,
) -> Student:
    student = Student(
        name=name,
        nisn=nisn,
        class_name=class_name,
        is_graduated=is_graduated,
        average_score=average_score,
        notes=notes,
    )
    session.add(student)
    await session.commit()
    await session.refresh(student)
    return student
