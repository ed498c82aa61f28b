"""
Declarative base, shared columns and base Pydantic schemas
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel as PydanticBaseModel, ConfigDict
from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Upper bound of the INTEGER primary keys
MAX_INT_ID = 2**31 - 1


def utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Declarative base for all tables"""


class BaseModel(Base):
    """Abstract model with surrogate key and audit timestamps"""
    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now_naive,
        nullable=False,
        comment="Row creation time (UTC)"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now_naive,
        onupdate=utc_now_naive,
        nullable=False,
        comment="Last modification time (UTC)"
    )


class BaseSchema(PydanticBaseModel):
    """Base schema reading attributes from ORM objects"""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)


class BaseResponseSchema(BaseSchema):
    """Fields every persisted record exposes"""

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
