from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from school_portal.models.news import NewsArticle


@dataclass
class NewsStatistics:
    total: int
    published: int
    draft: int
    archived: int
    featured: int
    total_views: int
    most_viewed: List[NewsArticle] = field(default_factory=list)
    recent: List[NewsArticle] = field(default_factory=list)
