"""
Service layer for the news domain.

Contains orchestration/business logic modules (editorial writes, queries and
image storage).
"""

from .editorial_service import NewsEditorialService
from .image_service import NewsImageStorage, UploadedImage
from .query_service import NewsQueryService

__all__ = [
    "NewsEditorialService",
    "NewsImageStorage",
    "NewsQueryService",
    "UploadedImage",
]
