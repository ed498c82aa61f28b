"""
News domain package.

Provides access to domain-specific services, repositories and facade helpers for
working with news articles. Concrete implementations live in subpackages.
"""

from .facade import NewsFacade  # noqa: F401
from .services.editorial_service import NewsEditorialService  # noqa: F401
from .services.image_service import NewsImageStorage, UploadedImage  # noqa: F401
from .services.query_service import NewsQueryService  # noqa: F401
from .repositories import NewsRepository, NewsFilters  # noqa: F401
