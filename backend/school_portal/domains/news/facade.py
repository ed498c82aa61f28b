"""
News domain facade.

The facade provides a stable entry point for the API layer to interact with
news functionality without knowing about the underlying services or
repositories.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.models.news import NewsArticle, NewsCategory, NewsStatus
from school_portal.models.user import User

from .dtos import NewsStatistics, Pagination
from .services.editorial_service import NewsEditorialService
from .services.image_service import AsyncReadable, NewsImageStorage, UploadedImage
from .services.query_service import NewsQueryService


@dataclass
class NewsFacade:
    """Facade coordinating news services and repositories."""

    session: AsyncSession
    storage: NewsImageStorage

    @property
    def query_service(self) -> NewsQueryService:
        return NewsQueryService(self.session)

    @property
    def editorial_service(self) -> NewsEditorialService:
        return NewsEditorialService(self.session, self.storage)

    async def list_public(self, **filters: Any) -> Tuple[List[NewsArticle], Pagination]:
        return await self.query_service.list_public(**filters)

    async def list_admin(self, **filters: Any) -> Tuple[List[NewsArticle], Pagination]:
        return await self.query_service.list_admin(**filters)

    async def get_public(self, identifier: str) -> NewsArticle:
        """Published article by id or slug; counts one view."""
        return await self.query_service.get_published_and_record_view(identifier)

    async def get_admin(self, identifier: str) -> NewsArticle:
        return await self.query_service.get_by_identifier(identifier, public=False)

    async def featured(self, limit: int = 5) -> List[NewsArticle]:
        return await self.query_service.featured(limit)

    async def statistics(self) -> NewsStatistics:
        return await self.query_service.statistics()

    async def categories(self) -> List[Dict[str, Any]]:
        return await self.query_service.categories()

    async def category_details(self, articles: Iterable[NewsArticle]) -> Dict[str, NewsCategory]:
        return await self.query_service.category_details(articles)

    async def stage_image(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        stream: AsyncReadable,
    ) -> UploadedImage:
        """Copy an upload into staging; create, update or upload_editor_image consume it."""
        return await self.storage.stage(filename, content_type, stream)

    async def create(
        self,
        data: Mapping[str, Any],
        actor: Optional[User] = None,
        image: Optional[UploadedImage] = None,
    ) -> NewsArticle:
        try:
            return await self.editorial_service.create(data, actor=actor, image=image)
        finally:
            # No-op once the file was moved into permanent storage
            self.storage.discard(image)

    async def update(
        self,
        news_id: int,
        data: Mapping[str, Any],
        image: Optional[UploadedImage] = None,
    ) -> NewsArticle:
        try:
            return await self.editorial_service.update(news_id, data, image=image)
        finally:
            self.storage.discard(image)

    async def delete(self, news_id: int) -> bool:
        return await self.editorial_service.delete(news_id)

    async def publish(self, news_id: int) -> NewsArticle:
        return await self.editorial_service.publish(news_id)

    async def unpublish(self, news_id: int) -> NewsArticle:
        return await self.editorial_service.unpublish(news_id)

    async def set_status(self, news_id: int, status: NewsStatus | str) -> NewsArticle:
        return await self.editorial_service.set_status(news_id, status)

    async def toggle_featured(self, news_id: int) -> NewsArticle:
        return await self.editorial_service.toggle_featured(news_id)

    async def upload_editor_image(self, image: UploadedImage) -> Dict[str, Any]:
        try:
            return await self.editorial_service.store_editor_image(image)
        finally:
            self.storage.discard(image)

    async def delete_image(self, filename: str) -> int:
        return await self.editorial_service.delete_stored_image(filename)

    def image_path(self, filename: str) -> Path:
        return self.storage.open_path(filename)
