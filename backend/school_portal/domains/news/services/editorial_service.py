"""
Editorial (write-side) service for the news domain.

Coordinates validation, slug allocation, excerpt derivation and the featured
image lifecycle around each database write.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel as PydanticModel, ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from school_portal.models.base import utc_now_naive
from school_portal.models.news import NewsArticle, NewsCreateSchema, NewsStatus, NewsUpdateSchema
from school_portal.models.user import User
from school_portal.utils.text import generate_excerpt, slugify

from ..repositories import NewsRepository
from .image_service import NewsImageStorage, UploadedImage

SchemaT = TypeVar("SchemaT", bound=PydanticModel)

# One retry after a unique violation on news.slug, then give up
SLUG_WRITE_ATTEMPTS = 2


@dataclass
class NewsEditorialService:
    """Create, update, delete and state changes for articles."""

    session: AsyncSession
    storage: NewsImageStorage

    def __post_init__(self) -> None:
        self._repo = NewsRepository(self.session)

    @staticmethod
    def _validate(schema: Type[SchemaT], data: Any) -> SchemaT:
        if isinstance(data, schema):
            return data
        try:
            return schema.model_validate(dict(data or {}))
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

    def _check_upload(self, image: Optional[UploadedImage]) -> None:
        if image is None:
            return
        try:
            self.storage.validate(image)
        except ValidationError:
            self.storage.discard(image)
            raise

    def _commit_upload(self, image: Optional[UploadedImage]) -> Optional[str]:
        if image is None:
            return None
        try:
            return self.storage.commit(image)
        except StorageError:
            self.storage.discard(image)
            raise

    def _remove_image_quietly(self, public_path: Optional[str]) -> None:
        if not public_path:
            return
        try:
            if not self.storage.delete(public_path):
                logger.warning(f"News image {public_path} was already missing")
        except StorageError as exc:
            logger.warning(f"Could not remove news image {public_path}: {exc.message}")

    async def _get_or_404(self, news_id: int) -> NewsArticle:
        article = await self._repo.fetch_by_id(news_id)
        if article is None:
            raise NotFoundError("News not found")
        return article

    async def create(
        self,
        data: Mapping[str, Any] | NewsCreateSchema,
        actor: Optional[User] = None,
        image: Optional[UploadedImage] = None,
    ) -> NewsArticle:
        """
        Create an article, storing the featured image first.

        The stored image is removed again when the insert fails.
        """
        try:
            payload = self._validate(NewsCreateSchema, data)
        except ValidationError:
            self.storage.discard(image)
            raise
        self._check_upload(image)

        base_slug = slugify(payload.title)
        slug = await self._repo.ensure_unique_slug(base_slug)

        values: Dict[str, Any] = {
            "title": payload.title,
            "content": payload.content,
            "excerpt": payload.excerpt or generate_excerpt(payload.content),
            "category": payload.category,
            "tags": list(payload.tags),
            "status": payload.status,
            "is_featured": payload.is_featured,
            "published_at": utc_now_naive() if payload.status == NewsStatus.PUBLISHED else None,
            "author_id": getattr(actor, "id", None),
            "author_name": getattr(actor, "username", None),
        }

        featured_image = self._commit_upload(image)
        values["featured_image"] = featured_image

        try:
            article = await self._insert(values, base_slug, slug)
        except Exception:
            await self.session.rollback()
            self._remove_image_quietly(featured_image)
            raise

        logger.info(f"Created news {article.id} ({article.slug}) with status {article.status.value}")
        return article

    async def _insert(self, values: Dict[str, Any], base_slug: str, slug: str) -> NewsArticle:
        for attempt in range(1, SLUG_WRITE_ATTEMPTS + 1):
            article = NewsArticle(slug=slug, **values)
            try:
                await self._repo.add(article)
                await self.session.commit()
            except IntegrityError as exc:
                await self.session.rollback()
                if not await self._repo.slug_exists(slug):
                    raise ConflictError("News could not be saved because of a conflicting record") from exc
                if attempt == SLUG_WRITE_ATTEMPTS:
                    raise ConflictError(f"Slug '{slug}' is already in use") from exc
                logger.warning(f"Slug {slug} was taken concurrently, looking up again")
                slug = await self._repo.ensure_unique_slug(base_slug)
                continue
            await self.session.refresh(article)
            return article
        raise ConflictError(f"Slug '{slug}' is already in use")

    async def update(
        self,
        news_id: int,
        data: Mapping[str, Any] | NewsUpdateSchema,
        image: Optional[UploadedImage] = None,
    ) -> NewsArticle:
        """
        Apply a partial update.

        The previous featured image is deleted only after the new row state is
        committed; a failed write removes the newly stored image instead.
        """
        article = await self._repo.fetch_by_id(news_id)
        if article is None:
            self.storage.discard(image)
            raise NotFoundError("News not found")

        try:
            payload = self._validate(NewsUpdateSchema, data)
        except ValidationError:
            self.storage.discard(image)
            raise
        self._check_upload(image)

        changes = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None
        }

        base_slug: Optional[str] = None
        if "title" in changes and changes["title"] != article.title:
            base_slug = slugify(changes["title"])
            changes["slug"] = await self._repo.ensure_unique_slug(base_slug, exclude_id=article.id)

        if "content" in changes and "excerpt" not in changes:
            changes["excerpt"] = generate_excerpt(changes["content"])

        if changes.get("status") == NewsStatus.PUBLISHED and article.published_at is None:
            changes["published_at"] = utc_now_naive()

        previous_image = article.featured_image
        new_image = self._commit_upload(image)
        if new_image:
            changes["featured_image"] = new_image

        try:
            article = await self._apply(article.id, changes, base_slug)
        except Exception:
            await self.session.rollback()
            self._remove_image_quietly(new_image)
            raise

        if new_image and previous_image and previous_image != new_image:
            self._remove_image_quietly(previous_image)

        logger.info(f"Updated news {article.id}: {', '.join(sorted(changes)) or 'no changes'}")
        return article

    async def _apply(
        self,
        news_id: int,
        changes: Dict[str, Any],
        base_slug: Optional[str],
    ) -> NewsArticle:
        for attempt in range(1, SLUG_WRITE_ATTEMPTS + 1):
            article = await self._get_or_404(news_id)
            for key, value in changes.items():
                setattr(article, key, value)
            try:
                await self.session.commit()
            except IntegrityError as exc:
                await self.session.rollback()
                slug = changes.get("slug")
                if base_slug is None or not await self._repo.slug_exists(slug, exclude_id=news_id):
                    raise ConflictError("News could not be saved because of a conflicting record") from exc
                if attempt == SLUG_WRITE_ATTEMPTS:
                    raise ConflictError(f"Slug '{slug}' is already in use") from exc
                logger.warning(f"Slug {slug} was taken concurrently, looking up again")
                changes["slug"] = await self._repo.ensure_unique_slug(base_slug, exclude_id=news_id)
                continue
            await self.session.refresh(article)
            return article
        raise ConflictError("News could not be saved")

    async def delete(self, news_id: int) -> bool:
        """Delete the row, then its image; a failed file removal is only logged."""
        article = await self._get_or_404(news_id)
        featured_image = article.featured_image

        await self._repo.delete(article)
        await self.session.commit()
        logger.info(f"Deleted news {news_id}")

        self._remove_image_quietly(featured_image)
        return True

    async def set_status(self, news_id: int, status: NewsStatus | str) -> NewsArticle:
        try:
            new_status = NewsStatus(status)
        except ValueError as exc:
            raise ValidationError(
                "Invalid status",
                errors=[{"field": "status", "message": "Status must be draft, published or archived"}],
            ) from exc

        article = await self._get_or_404(news_id)
        article.status = new_status
        # archived -> published keeps the original publication time
        if new_status == NewsStatus.PUBLISHED and article.published_at is None:
            article.published_at = utc_now_naive()

        await self.session.commit()
        await self.session.refresh(article)
        logger.info(f"News {news_id} status set to {new_status.value}")
        return article

    async def publish(self, news_id: int) -> NewsArticle:
        return await self.set_status(news_id, NewsStatus.PUBLISHED)

    async def unpublish(self, news_id: int) -> NewsArticle:
        return await self.set_status(news_id, NewsStatus.DRAFT)

    async def toggle_featured(self, news_id: int) -> NewsArticle:
        article = await self._get_or_404(news_id)
        article.is_featured = not article.is_featured
        await self.session.commit()
        await self.session.refresh(article)
        logger.info(f"News {news_id} featured flag set to {article.is_featured}")
        return article

    async def store_editor_image(self, image: UploadedImage) -> Dict[str, Any]:
        """Store an inline image for the rich text editor."""
        self._check_upload(image)
        public_path = self._commit_upload(image)
        return {
            "url": public_path,
            "filename": self.storage.filename_from_path(public_path),
            "original_name": image.original_name,
            "size": image.size,
        }

    async def delete_stored_image(self, filename: str) -> int:
        """
        Delete a stored image by filename.

        Articles featuring the image lose their reference in a commit that
        happens before the file is unlinked. Returns how many were cleared.
        """
        self.storage.open_path(filename)

        articles = await self._repo.fetch_by_featured_image(filename)
        for article in articles:
            article.featured_image = None
        if articles:
            await self.session.commit()
            logger.info(f"Cleared featured image {filename} from news {[article.id for article in articles]}")

        self.storage.delete(filename)
        return len(articles)
