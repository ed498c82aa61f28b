from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.models.base import MAX_INT_ID
from school_portal.models.student import Student


class StudentRepository:
    """Queries for student graduation records."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def fetch_by_id(self, student_id: int) -> Optional[Student]:
        if not 0 < student_id <= MAX_INT_ID:
            return None
        result = await self._session.execute(select(Student).where(Student.id == student_id))
        return result.scalar_one_or_none()

    async def nisn_exists(self, nisn: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Student.id).where(Student.nisn == nisn)
        if exclude_id is not None:
            stmt = stmt.where(Student.id != exclude_id)
        result = await self._session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def search_graduates(self, term: str) -> List[Student]:
        """Name contains ``term`` (case-insensitive) or NISN equals it."""
        stmt = (
            select(Student)
            .where(or_(Student.name.ilike(f"%{term}%"), Student.nisn == term))
            .order_by(Student.name, Student.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_students(
        self,
        *,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Student], int]:
        stmt = select(Student)
        count_stmt = select(func.count(Student.id))

        if search:
            like = f"%{search}%"
            criterion = or_(Student.name.ilike(like), Student.nisn.like(like))
            stmt = stmt.where(criterion)
            count_stmt = count_stmt.where(criterion)

        total = (await self._session.execute(count_stmt)).scalar() or 0
        stmt = stmt.order_by(desc(Student.created_at), desc(Student.id)).offset(offset).limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all()), total

    async def graduation_counts(self) -> Dict[str, Any]:
        stmt = select(
            func.count(Student.id),
            func.sum(case((Student.is_graduated.is_(True), 1), else_=0)),
            func.avg(Student.average_score),
        )
        total, graduated, average = (await self._session.execute(stmt)).one()
        return {
            "total": int(total or 0),
            "graduated": int(graduated or 0),
            "average_score": float(average) if average is not None else 0.0,
        }

    async def add(self, student: Student) -> Student:
        self._session.add(student)
        await self._session.flush()
        return student

    async def delete(self, student: Student) -> None:
        await self._session.delete(student)
        await self._session.flush()
