"""
News endpoints: public reading, admin management and image handling
"""

import mimetypes
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from loguru import logger

from school_portal.api.dependencies import get_current_user, get_news_facade
from school_portal.domains.news import NewsFacade, UploadedImage
from school_portal.domains.news.dtos import NewsStatistics
from school_portal.models import User
from school_portal.models.news import NewsArticle, NewsCategory, NewsStatus, NewsStatusUpdateSchema

router = APIRouter(prefix="/news", tags=["news"])


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_news(
    article: NewsArticle,
    categories: Optional[Dict[str, NewsCategory]] = None,
) -> Dict[str, Any]:
    category = (categories or {}).get(article.category)
    status_value = article.status.value if hasattr(article.status, "value") else article.status
    return {
        "id": article.id,
        "title": article.title,
        "slug": article.slug,
        "content": article.content,
        "excerpt": article.excerpt,
        "featured_image": article.featured_image,
        "author_id": article.author_id,
        "author_name": article.author_name,
        "category": article.category,
        "category_name": category.name if category else None,
        "category_color": category.color if category else None,
        "tags": list(article.tags or []),
        "status": status_value,
        "is_featured": article.is_featured,
        "view_count": article.view_count,
        "published_at": _isoformat(article.published_at),
        "created_at": _isoformat(article.created_at),
        "updated_at": _isoformat(article.updated_at),
    }


def serialize_news_summary(article: NewsArticle) -> Dict[str, Any]:
    return {
        "id": article.id,
        "title": article.title,
        "slug": article.slug,
        "view_count": article.view_count,
        "published_at": _isoformat(article.published_at),
        "created_at": _isoformat(article.created_at),
    }


def serialize_statistics(stats: NewsStatistics) -> Dict[str, Any]:
    return {
        "total": stats.total,
        "published": stats.published,
        "draft": stats.draft,
        "archived": stats.archived,
        "featured": stats.featured,
        "total_views": stats.total_views,
        "most_viewed": [serialize_news_summary(item) for item in stats.most_viewed],
        "recent": [serialize_news_summary(item) for item in stats.recent],
    }


def _form_payload(**fields: Optional[str]) -> Dict[str, Any]:
    """Only the form fields the client actually sent."""
    return {key: value for key, value in fields.items() if value is not None}


async def _render(facade: NewsFacade, article: NewsArticle) -> Dict[str, Any]:
    return serialize_news(article, await facade.category_details([article]))


async def _render_many(facade: NewsFacade, articles: List[NewsArticle]) -> List[Dict[str, Any]]:
    categories = await facade.category_details(articles)
    return [serialize_news(article, categories) for article in articles]


async def _stage_image(facade: NewsFacade, image: Optional[UploadFile]) -> Optional[UploadedImage]:
    if image is None or not image.filename:
        return None
    return await facade.stage_image(image.filename, image.content_type, image)


# Public routes

@router.get("", response_model=Dict[str, Any])
async def list_news(
    category: Optional[str] = Query(None, description="Category slug"),
    search: Optional[str] = Query(None, description="Matches title, content or excerpt"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None),
    sort_by_camel: Optional[str] = Query(None, alias="sortBy", include_in_schema=False),
    sort_order: Optional[str] = Query(None),
    sort_order_camel: Optional[str] = Query(None, alias="sortOrder", include_in_schema=False),
    facade: NewsFacade = Depends(get_news_facade),
):
    """Published articles only."""
    logger.info(f"Public news list: category={category}, search={search}, page={page}, limit={limit}")
    items, pagination = await facade.list_public(
        category=category,
        search=search,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
        sort_by=sort_by or sort_by_camel,
        sort_order=sort_order or sort_order_camel,
    )
    return {
        "items": await _render_many(facade, items),
        "pagination": pagination.to_dict(),
    }


@router.get("/featured", response_model=List[Dict[str, Any]])
async def list_featured_news(
    limit: int = Query(5),
    facade: NewsFacade = Depends(get_news_facade),
):
    logger.info(f"Featured news request: limit={limit}")
    return await _render_many(facade, await facade.featured(limit))


@router.get("/categories", response_model=List[Dict[str, Any]])
async def list_categories(facade: NewsFacade = Depends(get_news_facade)):
    logger.info("News categories request")
    categories = await facade.categories()
    for category in categories:
        category["created_at"] = _isoformat(category["created_at"])
    return categories


@router.get("/images/{filename}")
async def get_news_image(filename: str, facade: NewsFacade = Depends(get_news_facade)):
    path = facade.image_path(filename)
    media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return FileResponse(path, media_type=media_type)


# Admin routes

@router.get("/stats", response_model=Dict[str, Any])
async def get_news_stats(
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    logger.info(f"News statistics requested by {current_user.username}")
    return serialize_statistics(await facade.statistics())


@router.get("/admin", response_model=Dict[str, Any])
async def list_news_admin(
    category: Optional[str] = Query(None),
    status_filter: Optional[NewsStatus] = Query(None, alias="status"),
    author: Optional[str] = Query(None, description="Author name substring"),
    search: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    featured: Optional[bool] = Query(None),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None),
    sort_by_camel: Optional[str] = Query(None, alias="sortBy", include_in_schema=False),
    sort_order: Optional[str] = Query(None),
    sort_order_camel: Optional[str] = Query(None, alias="sortOrder", include_in_schema=False),
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    """All articles regardless of status."""
    logger.info(
        f"Admin news list by {current_user.username}: status={status_filter}, "
        f"category={category}, page={page}, limit={limit}"
    )
    items, pagination = await facade.list_admin(
        category=category,
        status=status_filter,
        author=author,
        search=search,
        start_date=start_date,
        end_date=end_date,
        featured=featured,
        page=page,
        limit=limit,
        sort_by=sort_by or sort_by_camel,
        sort_order=sort_order or sort_order_camel,
    )
    return {
        "items": await _render_many(facade, items),
        "pagination": pagination.to_dict(),
    }


@router.get("/admin/{identifier}", response_model=Dict[str, Any])
async def get_news_admin(
    identifier: str,
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    article = await facade.get_admin(identifier)
    return await _render(facade, article)


@router.get("/{identifier}", response_model=Dict[str, Any])
async def get_news(identifier: str, facade: NewsFacade = Depends(get_news_facade)):
    """Published article by numeric id or slug; counts a view."""
    logger.info(f"Public news detail: {identifier}")
    article = await facade.get_public(identifier)
    return await _render(facade, article)


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_news(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    excerpt: Optional[str] = Form(None),
    status_value: Optional[str] = Form(None, alias="status"),
    tags: Optional[str] = Form(None, description="JSON array or comma-separated list"),
    is_featured: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    logger.info(f"Create news request by {current_user.username}: {title}")
    data = _form_payload(
        title=title,
        content=content,
        category=category,
        excerpt=excerpt,
        status=status_value,
        tags=tags,
        is_featured=is_featured,
    )
    staged = await _stage_image(facade, image)
    article = await facade.create(data, actor=current_user, image=staged)
    return await _render(facade, article)


@router.post("/upload", response_model=Dict[str, Any])
async def upload_editor_image(
    image: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    """Store an inline image for the rich text editor."""
    logger.info(f"Editor image upload by {current_user.username}: {image.filename}")
    staged = await facade.stage_image(image.filename, image.content_type, image)
    return await facade.upload_editor_image(staged)


@router.put("/{news_id}", response_model=Dict[str, Any])
async def update_news(
    news_id: int,
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    excerpt: Optional[str] = Form(None),
    status_value: Optional[str] = Form(None, alias="status"),
    tags: Optional[str] = Form(None),
    is_featured: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    logger.info(f"Update news {news_id} by {current_user.username}")
    data = _form_payload(
        title=title,
        content=content,
        category=category,
        excerpt=excerpt,
        status=status_value,
        tags=tags,
        is_featured=is_featured,
    )
    staged = await _stage_image(facade, image)
    article = await facade.update(news_id, data, image=staged)
    return await _render(facade, article)


@router.patch("/{news_id}/publish", response_model=Dict[str, Any])
async def publish_news(
    news_id: int,
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    logger.info(f"Publish news {news_id} by {current_user.username}")
    return await _render(facade, await facade.publish(news_id))


@router.patch("/{news_id}/unpublish", response_model=Dict[str, Any])
async def unpublish_news(
    news_id: int,
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    logger.info(f"Unpublish news {news_id} by {current_user.username}")
    return await _render(facade, await facade.unpublish(news_id))


@router.patch("/{news_id}/status", response_model=Dict[str, Any])
async def update_news_status(
    news_id: int,
    payload: NewsStatusUpdateSchema,
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    logger.info(f"Set news {news_id} status to {payload.status.value} by {current_user.username}")
    return await _render(facade, await facade.set_status(news_id, payload.status))


@router.patch("/{news_id}/toggle-featured", response_model=Dict[str, Any])
async def toggle_featured_news(
    news_id: int,
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    logger.info(f"Toggle featured for news {news_id} by {current_user.username}")
    return await _render(facade, await facade.toggle_featured(news_id))


@router.delete("/images/{filename}", response_model=Dict[str, Any])
async def delete_news_image(
    filename: str,
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    logger.info(f"Delete image {filename} by {current_user.username}")
    await facade.delete_image(filename)
    return {"success": True, "message": "Image deleted"}


@router.delete("/{news_id}", response_model=Dict[str, Any])
async def delete_news(
    news_id: int,
    current_user: User = Depends(get_current_user),
    facade: NewsFacade = Depends(get_news_facade),
):
    logger.info(f"Delete news {news_id} by {current_user.username}")
    await facade.delete(news_id)
    return {"success": True, "message": "News deleted"}
