"""
Student record use cases.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.core.exceptions import ConflictError, NotFoundError, ValidationError
from school_portal.models.student import Student, StudentCreateSchema
from school_portal.utils.pagination import Pagination

from .repository import StudentRepository

MAX_PAGE_SIZE = 100


@dataclass
class StudentService:
    session: AsyncSession

    @property
    def repo(self) -> StudentRepository:
        return StudentRepository(self.session)

    @staticmethod
    def _validate(data: Mapping[str, Any]) -> StudentCreateSchema:
        try:
            return StudentCreateSchema.model_validate(dict(data))
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

    async def check_graduation(self, search: Optional[str]) -> List[Student]:
        term = (search or "").strip()
        if not term:
            raise ValidationError("Search parameter (name or NISN) is required")

        students = await self.repo.search_graduates(term)
        if not students:
            raise NotFoundError("Student not found")
        return students

    async def list_students(
        self,
        *,
        page: Optional[int] = 1,
        limit: Optional[int] = 10,
        search: Optional[str] = None,
    ) -> Tuple[List[Student], Pagination]:
        page = max(page or 1, 1)
        limit = min(max(limit or 10, 1), MAX_PAGE_SIZE)
        students, total = await self.repo.list_students(
            search=(search or "").strip() or None,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return students, Pagination.build(page, limit, total)

    async def _save(self, student: Student) -> Student:
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError("NISN is already registered") from exc
        await self.session.refresh(student)
        return student

    async def create(self, data: Mapping[str, Any]) -> Student:
        payload = self._validate(data)
        if await self.repo.nisn_exists(payload.nisn):
            raise ConflictError("NISN is already registered")

        student = Student(**payload.model_dump())
        self.session.add(student)
        student = await self._save(student)
        logger.info(f"Created student {student.id} ({student.nisn})")
        return student

    async def update(self, student_id: int, data: Mapping[str, Any]) -> Student:
        student = await self.repo.fetch_by_id(student_id)
        if student is None:
            raise NotFoundError("Student not found")

        payload = self._validate(data)
        if await self.repo.nisn_exists(payload.nisn, exclude_id=student_id):
            raise ConflictError("NISN is already registered for another student")

        for key, value in payload.model_dump().items():
            setattr(student, key, value)
        student = await self._save(student)
        logger.info(f"Updated student {student.id}")
        return student

    async def delete(self, student_id: int) -> None:
        student = await self.repo.fetch_by_id(student_id)
        if student is None:
            raise NotFoundError("Student not found")
        await self.repo.delete(student)
        await self.session.commit()
        logger.info(f"Deleted student {student_id}")

    async def graduation_stats(self) -> Dict[str, Any]:
        counts = await self.repo.graduation_counts()
        total = counts["total"]
        graduated = counts["graduated"]
        return {
            "total": total,
            "graduated": graduated,
            "not_graduated": total - graduated,
            "average_score": round(counts["average_score"], 2),
            "graduation_rate": round(graduated / total * 100) if total else 0,
        }
