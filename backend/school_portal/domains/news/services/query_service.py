"""
Query service for the news domain.

Provides read operations backed by ``NewsRepository``; the only write here is
the view counter bump on public detail reads.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.core.config import settings
from school_portal.core.exceptions import NotFoundError
from school_portal.models.base import to_naive_utc
from school_portal.models.news import NewsArticle, NewsCategory, NewsStatus

from ..dtos import NewsStatistics, Pagination
from ..repositories import NewsFilters, NewsRepository

NUMERIC_IDENTIFIER = re.compile(r"^\d+$")
FEATURED_MAX_LIMIT = 10


def clamp_page(page: Optional[int]) -> int:
    return max(page or 1, 1)


def clamp_limit(limit: Optional[int], maximum: int) -> int:
    if not limit or limit < 1:
        limit = settings.NEWS_DEFAULT_PAGE_SIZE
    return min(limit, maximum)


@dataclass
class NewsQueryService:
    """Encapsulates read-only news use cases."""

    session: AsyncSession

    @property
    def repo(self) -> NewsRepository:
        return NewsRepository(self.session)

    async def _lookup(self, identifier: str) -> Optional[NewsArticle]:
        identifier = str(identifier).strip()
        if NUMERIC_IDENTIFIER.match(identifier):
            return await self.repo.fetch_by_id(int(identifier))
        return await self.repo.fetch_by_slug(identifier)

    async def get_by_identifier(self, identifier: str, *, public: bool = True) -> NewsArticle:
        """
        Resolve an all-digits identifier as an id and anything else as a slug.

        The public variant hides articles that are not published.
        """
        article = await self._lookup(identifier)
        if article is None:
            raise NotFoundError("News not found")
        if public and article.status != NewsStatus.PUBLISHED:
            raise NotFoundError("News not found")
        return article

    async def get_published_and_record_view(self, identifier: str) -> NewsArticle:
        article = await self.get_by_identifier(identifier, public=True)
        await self.repo.increment_views(article.id)
        await self.session.commit()
        # Reload so the returned count is the persisted one
        await self.session.refresh(article)
        logger.debug(f"News {article.id} view count is now {article.view_count}")
        return article

    async def _list(self, filters: NewsFilters) -> Tuple[List[NewsArticle], Pagination]:
        items, total = await self.repo.list_news(filters)
        return items, Pagination.build(filters.page, filters.limit, total)

    async def list_public(
        self,
        *,
        category: Optional[str] = None,
        search: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> Tuple[List[NewsArticle], Pagination]:
        """Published articles only, newest publication first by default."""
        filters = NewsFilters(
            category=category or None,
            status=NewsStatus.PUBLISHED,
            search=search or None,
            start_date=to_naive_utc(start_date),
            end_date=to_naive_utc(end_date),
            page=clamp_page(page),
            limit=clamp_limit(limit, settings.NEWS_PUBLIC_MAX_PAGE_SIZE),
            sort_by=sort_by or "published_at",
            sort_order=sort_order or "DESC",
        )
        return await self._list(filters)

    async def list_admin(
        self,
        *,
        category: Optional[str] = None,
        status: Optional[NewsStatus] = None,
        author: Optional[str] = None,
        search: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        featured: Optional[bool] = None,
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> Tuple[List[NewsArticle], Pagination]:
        filters = NewsFilters(
            category=category or None,
            status=status,
            author=author or None,
            search=search or None,
            start_date=to_naive_utc(start_date),
            end_date=to_naive_utc(end_date),
            featured=featured,
            page=clamp_page(page),
            limit=clamp_limit(limit, settings.NEWS_ADMIN_MAX_PAGE_SIZE),
            sort_by=sort_by or "created_at",
            sort_order=sort_order or "DESC",
        )
        return await self._list(filters)

    async def featured(self, limit: int = 5) -> List[NewsArticle]:
        limit = max(1, min(limit, FEATURED_MAX_LIMIT))
        return await self.repo.fetch_featured(limit)

    async def statistics(self) -> NewsStatistics:
        return await self.repo.aggregate_statistics()

    async def categories(self) -> List[Dict[str, Any]]:
        return await self.repo.list_categories()

    async def category_details(self, articles: Iterable[NewsArticle]) -> Dict[str, NewsCategory]:
        """Category rows for the articles, keyed by slug; unknown slugs are absent."""
        return await self.repo.category_details(article.category for article in articles)
