"""
Authentication use cases.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.core.config import settings
from school_portal.core.exceptions import AuthenticationError, ValidationError
from school_portal.core.security import create_access_token, decode_token, hash_password, verify_password
from school_portal.models.user import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH, User

from .repository import UserRepository

INVALID_CREDENTIALS = "Invalid username or password"


def public_user(user: User) -> Dict[str, Any]:
    return {"id": user.id, "username": user.username, "email": user.email}


@dataclass
class AuthService:
    session: AsyncSession

    @property
    def repo(self) -> UserRepository:
        return UserRepository(self.session)

    async def login(self, username: Optional[str], password: Optional[str]) -> Tuple[str, User]:
        """Check credentials and issue an access token."""
        if not username or not password:
            raise ValidationError("Username and password are required")

        user = await self.repo.fetch_by_username(username)
        if user is None or not user.is_active:
            logger.info(f"Login rejected for unknown or inactive user {username}")
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            logger.info(f"Login rejected for {username}: wrong password")
            raise AuthenticationError(INVALID_CREDENTIALS)

        token = create_access_token(
            user.id,
            extra_claims={"username": user.username, "email": user.email},
        )
        logger.info(f"User {username} logged in")
        return token, user

    async def user_from_token(self, token: Optional[str]) -> User:
        if not token:
            raise AuthenticationError("Access token required")

        payload = decode_token(token)
        if payload is None:
            raise AuthenticationError("Invalid or expired token")

        try:
            user_id = int(payload.get("sub", ""))
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid or expired token")

        user = await self.repo.fetch_by_id(user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("User not found or inactive")
        return user

    async def change_password(self, user: User, data: Mapping[str, Any]) -> None:
        current_password = data.get("current_password")
        new_password = data.get("new_password")

        if not current_password or not new_password:
            raise ValidationError("Current password and new password are required")
        if len(new_password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(f"New password must be at least {PASSWORD_MIN_LENGTH} characters")
        if len(new_password.encode("utf-8")) > PASSWORD_MAX_LENGTH:
            raise ValidationError(f"New password must not exceed {PASSWORD_MAX_LENGTH} bytes")

        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")

        user.password_hash = hash_password(new_password)
        await self.session.commit()
        logger.info(f"Password changed for user {user.username}")


async def seed_default_admin(session: AsyncSession) -> Optional[User]:
    """Create the configured bootstrap admin when it does not exist yet."""
    repo = UserRepository(session)
    if await repo.fetch_by_username(settings.DEFAULT_ADMIN_USERNAME):
        return None

    user = User(
        username=settings.DEFAULT_ADMIN_USERNAME,
        email=settings.DEFAULT_ADMIN_EMAIL,
        password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
        role="admin",
    )
    await repo.add(user)
    await session.commit()
    logger.info(f"Default admin user {user.username} created")
    return user
