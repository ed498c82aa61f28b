"""
API dependencies
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.core.database import get_db
from school_portal.domains.accounts import AuthService
from school_portal.domains.news import NewsFacade, NewsImageStorage
from school_portal.domains.school import SchoolInfoService
from school_portal.domains.students import StudentService
from school_portal.models import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """
    Get current user from the Bearer token

    Raises:
        AuthenticationError: If the token is missing, invalid or expired, or
            the user no longer exists
    """
    return await auth.user_from_token(token)


def get_image_storage(request: Request) -> NewsImageStorage:
    """
    Image storage built at startup; created lazily when the app was not started
    through its lifecycle hooks.
    """
    storage = getattr(request.app.state, "image_storage", None)
    if storage is None:
        storage = NewsImageStorage.from_settings()
        request.app.state.image_storage = storage
    return storage


def get_news_facade(
    db: AsyncSession = Depends(get_db),
    storage: NewsImageStorage = Depends(get_image_storage),
) -> NewsFacade:
    """
    Provide NewsFacade instance for request-scoped operations.
    """
    return NewsFacade(db, storage)


def get_student_service(db: AsyncSession = Depends(get_db)) -> StudentService:
    return StudentService(db)


def get_school_service(db: AsyncSession = Depends(get_db)) -> SchoolInfoService:
    return SchoolInfoService(db)
