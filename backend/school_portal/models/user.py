"""
Admin user model and authentication schemas
"""

from typing import List, Optional

from pydantic import Field
from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel, BaseSchema

PASSWORD_MIN_LENGTH = 6
# bcrypt only looks at the first 72 bytes
PASSWORD_MAX_LENGTH = 72


class User(BaseModel):
    """Administrator account"""
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default="admin", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    articles: Mapped[List["NewsArticle"]] = relationship(  # noqa: F821
        "NewsArticle",
        back_populates="author",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"


# Pydantic Schemas
class LoginSchema(BaseSchema):
    username: Optional[str] = None
    password: Optional[str] = None


class ChangePasswordSchema(BaseSchema):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class UserPublicSchema(BaseSchema):
    """User fields exposed to clients"""

    id: int
    username: str
    email: str
    role: str = "admin"


class TokenResponseSchema(BaseSchema):
    token: str
    user: UserPublicSchema
    expires_in: int = Field(..., description="Token lifetime in seconds")
