"""
Student graduation record model and schemas
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator
from sqlalchemy import Boolean, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, BaseResponseSchema, BaseSchema


class Student(BaseModel):
    """Final-year student with graduation outcome"""
    __tablename__ = "students"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    nisn: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        comment="National student identification number"
    )
    class_name: Mapped[str] = mapped_column(String(10), nullable=False)
    is_graduated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    average_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        Index('idx_students_name', 'name'),
        Index('idx_students_is_graduated', 'is_graduated'),
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, nisn={self.nisn})>"


# Pydantic Schemas
class StudentCreateSchema(BaseSchema):
    """Schema for creating or fully replacing a student record"""

    name: str = Field(..., min_length=2, max_length=100)
    nisn: str = Field(..., min_length=10, max_length=20)
    class_name: str = Field(..., min_length=1, max_length=10)
    is_graduated: bool = False
    average_score: Optional[float] = Field(None, ge=0, le=100)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator('nisn')
    @classmethod
    def validate_nisn(cls, v):
        if not v.isdigit():
            raise ValueError('NISN must contain digits only')
        return v

    @field_validator('average_score')
    @classmethod
    def round_score(cls, v):
        if v is None:
            return v
        return round(v, 2)


class StudentResponseSchema(BaseResponseSchema):
    name: str
    nisn: str
    class_name: str
    is_graduated: bool
    average_score: Optional[float] = None
    notes: Optional[str] = None


class GraduationResultSchema(BaseSchema):
    """Public graduation lookup result"""

    name: str
    nisn: str
    class_name: str
    is_graduated: bool
    average_score: Optional[float] = None
    notes: Optional[str] = None
