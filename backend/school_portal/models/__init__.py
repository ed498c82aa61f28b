"""
Database models
"""

from .base import Base, BaseModel
from .user import User
from .student import Student
from .school import SchoolInfo
from .news import NewsArticle, NewsCategory, NewsStatus

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Student",
    "SchoolInfo",
    "NewsArticle",
    "NewsCategory",
    "NewsStatus",
]
