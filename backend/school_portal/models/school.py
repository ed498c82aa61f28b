"""
School profile model and schema
"""

from typing import Optional

from pydantic import Field
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, BaseResponseSchema, BaseSchema


class SchoolInfo(BaseModel):
    """Single-row school profile shown on the public site"""
    __tablename__ = "school_info"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    principal: Mapped[Optional[str]] = mapped_column(String(100))
    academic_year: Mapped[Optional[str]] = mapped_column(String(20))
    about: Mapped[Optional[str]] = mapped_column(Text)
    vision: Mapped[Optional[str]] = mapped_column(Text)
    mission: Mapped[Optional[str]] = mapped_column(Text)
    logo_url: Mapped[Optional[str]] = mapped_column(String(500))

    def __repr__(self) -> str:
        return f"<SchoolInfo(id={self.id}, name={self.name})>"


# Pydantic Schemas
class SchoolInfoUpdateSchema(BaseSchema):
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    principal: Optional[str] = Field(None, max_length=100)
    academic_year: Optional[str] = Field(None, max_length=20)
    about: Optional[str] = None
    vision: Optional[str] = None
    mission: Optional[str] = None
    logo_url: Optional[str] = Field(None, max_length=500)


class SchoolInfoResponseSchema(BaseResponseSchema, SchoolInfoUpdateSchema):
    pass
