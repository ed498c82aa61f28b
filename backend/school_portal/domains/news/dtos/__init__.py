from school_portal.utils.pagination import Pagination
from .stats import NewsStatistics

__all__ = ["NewsStatistics", "Pagination"]
