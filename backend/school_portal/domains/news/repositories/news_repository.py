"""
SQLAlchemy repository for news persistence operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger
from sqlalchemy import and_, asc, case, desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.models.base import MAX_INT_ID
from school_portal.models.news import NewsArticle, NewsCategory, NewsStatus
from ..dtos import NewsStatistics

SORTABLE_COLUMNS = {
    "created_at": NewsArticle.created_at,
    "published_at": NewsArticle.published_at,
    "view_count": NewsArticle.view_count,
    "title": NewsArticle.title,
}
# Accepted for compatibility with camelCase clients
SORT_ALIASES = {
    "createdAt": "created_at",
    "publishedAt": "published_at",
    "viewCount": "view_count",
}
DEFAULT_SORT_BY = "created_at"

# Path segments of fixed routes under /news that a slug must not shadow
RESERVED_SLUGS = frozenset({"admin", "categories", "featured", "images", "stats", "upload"})

DEFAULT_CATEGORIES: List[Dict[str, str]] = [
    {"name": "Pengumuman", "slug": "pengumuman", "description": "Pengumuman resmi dari sekolah", "color": "#dc3545"},
    {"name": "Kegiatan Sekolah", "slug": "kegiatan-sekolah", "description": "Berita tentang kegiatan sekolah", "color": "#28a745"},
    {"name": "Prestasi", "slug": "prestasi", "description": "Prestasi siswa dan sekolah", "color": "#ffc107"},
    {"name": "Akademik", "slug": "akademik", "description": "Informasi akademik dan pembelajaran", "color": "#007bff"},
    {"name": "Umum", "slug": "umum", "description": "Berita umum sekolah", "color": "#6c757d"},
]


@dataclass
class NewsFilters:
    category: Optional[str] = None
    status: Optional[NewsStatus] = None
    author: Optional[str] = None
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    featured: Optional[bool] = None
    page: int = 1
    limit: int = 10
    sort_by: str = DEFAULT_SORT_BY
    sort_order: str = "DESC"

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * self.limit


def resolve_sort_key(sort_by: Optional[str]) -> Optional[str]:
    """Map a requested sort key onto an allowed column name, or None."""
    if not sort_by:
        return None
    key = SORT_ALIASES.get(sort_by, sort_by)
    return key if key in SORTABLE_COLUMNS else None


class NewsRepository:
    """Encapsulates queries for the news domain."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def fetch_by_id(self, news_id: int) -> Optional[NewsArticle]:
        if not 0 < news_id <= MAX_INT_ID:
            return None
        result = await self._session.execute(
            select(NewsArticle).where(NewsArticle.id == news_id)
        )
        return result.scalar_one_or_none()

    async def fetch_by_slug(self, slug: str) -> Optional[NewsArticle]:
        result = await self._session.execute(
            select(NewsArticle).where(NewsArticle.slug == slug)
        )
        return result.scalar_one_or_none()

    async def fetch_by_featured_image(self, filename: str) -> List[NewsArticle]:
        """Articles whose featured image is the stored file ``filename``."""
        result = await self._session.execute(
            select(NewsArticle).where(
                or_(
                    NewsArticle.featured_image == filename,
                    NewsArticle.featured_image.like(f"%/{filename}"),
                )
            )
        )
        # LIKE treats _ and % in the name as wildcards
        return [
            article
            for article in result.scalars().all()
            if article.featured_image.rsplit("/", 1)[-1] == filename
        ]

    async def category_details(self, slugs: Iterable[str]) -> Dict[str, NewsCategory]:
        """Categories keyed by slug, for the given category slugs."""
        wanted = {slug for slug in slugs if slug}
        if not wanted:
            return {}
        result = await self._session.execute(
            select(NewsCategory).where(NewsCategory.slug.in_(wanted))
        )
        return {category.slug: category for category in result.scalars().all()}

    async def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(NewsArticle.id).where(NewsArticle.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(NewsArticle.id != exclude_id)
        result = await self._session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def ensure_unique_slug(self, base_slug: str, exclude_id: Optional[int] = None) -> str:
        """
        Return ``base_slug`` or the first free ``base_slug-N`` (N >= 1).

        Reserved route names count as taken. The lookup and the later insert
        are not atomic; the unique constraint on ``news.slug`` catches
        concurrent writers.
        """
        slug = base_slug
        counter = 1
        while slug in RESERVED_SLUGS or await self.slug_exists(slug, exclude_id=exclude_id):
            slug = f"{base_slug}-{counter}"
            counter += 1
        return slug

    def _build_criteria(self, filters: NewsFilters) -> List:
        criteria = []

        if filters.category:
            criteria.append(NewsArticle.category == filters.category)

        if filters.status:
            status_value = (
                filters.status
                if isinstance(filters.status, NewsStatus)
                else NewsStatus(str(filters.status))
            )
            criteria.append(NewsArticle.status == status_value)

        if filters.author:
            criteria.append(NewsArticle.author_name.ilike(f"%{filters.author}%"))

        if filters.featured is not None:
            criteria.append(NewsArticle.is_featured.is_(filters.featured))

        if filters.start_date:
            criteria.append(NewsArticle.published_at >= filters.start_date)

        if filters.end_date:
            criteria.append(NewsArticle.published_at <= filters.end_date)

        if filters.search:
            like = f"%{filters.search}%"
            criteria.append(
                or_(
                    NewsArticle.title.ilike(like),
                    NewsArticle.content.ilike(like),
                    NewsArticle.excerpt.ilike(like),
                )
            )

        return criteria

    def _ordering(self, filters: NewsFilters) -> List:
        key = resolve_sort_key(filters.sort_by)
        if key is None:
            return [desc(NewsArticle.created_at), desc(NewsArticle.id)]
        direction = asc if (filters.sort_order or "").upper() == "ASC" else desc
        return [direction(SORTABLE_COLUMNS[key]), direction(NewsArticle.id)]

    async def list_news(self, filters: NewsFilters) -> Tuple[List[NewsArticle], int]:
        """List articles matching every present filter, with the total count."""
        stmt = select(NewsArticle)
        count_stmt = select(func.count(NewsArticle.id))

        criteria = self._build_criteria(filters)

        if criteria:
            stmt = stmt.where(and_(*criteria))
            count_stmt = count_stmt.where(and_(*criteria))

        count_result = await self._session.execute(count_stmt)
        total = count_result.scalar() or 0

        stmt = stmt.order_by(*self._ordering(filters)).offset(filters.offset).limit(filters.limit)

        result = await self._session.execute(stmt)
        return list(result.scalars().all()), total

    async def add(self, article: NewsArticle) -> NewsArticle:
        self._session.add(article)
        await self._session.flush()
        return article

    async def delete(self, article: NewsArticle) -> None:
        await self._session.delete(article)
        await self._session.flush()

    async def increment_views(self, news_id: int) -> None:
        """Atomic ``view_count = view_count + 1``; concurrent readers never lose a view."""
        await self._session.execute(
            update(NewsArticle)
            .where(NewsArticle.id == news_id)
            .values(view_count=NewsArticle.view_count + 1)
            .execution_options(synchronize_session=False)
        )

    async def fetch_featured(self, limit: int = 5) -> List[NewsArticle]:
        stmt = (
            select(NewsArticle)
            .where(
                and_(
                    NewsArticle.status == NewsStatus.PUBLISHED,
                    NewsArticle.is_featured.is_(True),
                )
            )
            .order_by(desc(NewsArticle.published_at), desc(NewsArticle.id))
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def aggregate_statistics(self, top: int = 5) -> NewsStatistics:
        counts_stmt = select(
            func.count(NewsArticle.id),
            func.sum(case((NewsArticle.status == NewsStatus.PUBLISHED, 1), else_=0)),
            func.sum(case((NewsArticle.status == NewsStatus.DRAFT, 1), else_=0)),
            func.sum(case((NewsArticle.status == NewsStatus.ARCHIVED, 1), else_=0)),
            func.sum(case((NewsArticle.is_featured.is_(True), 1), else_=0)),
            func.coalesce(func.sum(NewsArticle.view_count), 0),
        )
        row = (await self._session.execute(counts_stmt)).one()
        total, published, draft, archived, featured, total_views = (int(value or 0) for value in row)

        published_only = NewsArticle.status == NewsStatus.PUBLISHED
        most_viewed_result = await self._session.execute(
            select(NewsArticle)
            .where(published_only)
            .order_by(desc(NewsArticle.view_count), desc(NewsArticle.id))
            .limit(top)
        )
        recent_result = await self._session.execute(
            select(NewsArticle)
            .where(published_only)
            .order_by(
                desc(NewsArticle.published_at),
                desc(NewsArticle.created_at),
                desc(NewsArticle.id),
            )
            .limit(top)
        )

        return NewsStatistics(
            total=total,
            published=published,
            draft=draft,
            archived=archived,
            featured=featured,
            total_views=total_views,
            most_viewed=list(most_viewed_result.scalars().all()),
            recent=list(recent_result.scalars().all()),
        )

    async def list_categories(self) -> List[Dict[str, Any]]:
        """Categories with the number of published articles in each."""
        news_count = func.count(NewsArticle.id).label("news_count")
        stmt = (
            select(NewsCategory, news_count)
            .outerjoin(
                NewsArticle,
                and_(
                    NewsArticle.category == NewsCategory.slug,
                    NewsArticle.status == NewsStatus.PUBLISHED,
                ),
            )
            .group_by(NewsCategory.id)
            .order_by(asc(NewsCategory.name))
        )
        result = await self._session.execute(stmt)
        return [
            {
                "id": category.id,
                "name": category.name,
                "slug": category.slug,
                "description": category.description,
                "color": category.color,
                "created_at": category.created_at,
                "news_count": count or 0,
            }
            for category, count in result.all()
        ]

    async def seed_default_categories(self) -> int:
        """Insert missing default categories, returning how many were added."""
        result = await self._session.execute(select(NewsCategory.slug))
        existing = set(result.scalars().all())
        created = 0
        for payload in DEFAULT_CATEGORIES:
            if payload["slug"] in existing:
                continue
            self._session.add(NewsCategory(**payload))
            created += 1
        if created:
            await self._session.commit()
            logger.info(f"Seeded {created} default news categories")
        return created
