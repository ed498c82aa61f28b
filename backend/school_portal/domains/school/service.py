"""
School profile use cases.

The profile is a single logical row; reads return the most recent one and
writes update it in place, inserting it when the table is empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.core.exceptions import NotFoundError, ValidationError
from school_portal.models.school import SchoolInfo, SchoolInfoUpdateSchema

DEFAULT_SCHOOL_INFO: Dict[str, Any] = {
    "name": "SD Kebon Bawang 03",
    "address": "Jl. Pendidikan No. 123, Kota Contoh",
    "phone": "021-12345678",
    "email": "info@sdcontoh.sch.id",
    "principal": "Bapak/Ibu Kepala Sekolah",
    "academic_year": "2023/2024",
    "about": "SD Kebon Bawang 03 adalah sekolah dasar yang berkomitmen memberikan pendidikan berkualitas.",
    "vision": "Menjadi sekolah dasar terdepan dalam mencerdaskan bangsa.",
    "mission": (
        "Memberikan pendidikan berkualitas, Mengembangkan karakter siswa, "
        "Menciptakan lingkungan belajar yang nyaman"
    ),
}


async def _latest(session: AsyncSession) -> Optional[SchoolInfo]:
    result = await session.execute(select(SchoolInfo).order_by(desc(SchoolInfo.id)).limit(1))
    return result.scalar_one_or_none()


@dataclass
class SchoolInfoService:
    session: AsyncSession

    async def get(self) -> SchoolInfo:
        info = await _latest(self.session)
        if info is None:
            raise NotFoundError("School information not found")
        return info

    async def upsert(self, data: Mapping[str, Any]) -> SchoolInfo:
        if not str(data.get("name") or "").strip():
            raise ValidationError("School name is required", errors=[{"field": "name", "message": "Field required"}])
        try:
            payload = SchoolInfoUpdateSchema.model_validate(dict(data))
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

        info = await _latest(self.session)
        if info is None:
            info = SchoolInfo(**payload.model_dump())
            self.session.add(info)
            logger.info("Creating school profile")
        else:
            for key, value in payload.model_dump().items():
                setattr(info, key, value)
            logger.info(f"Updating school profile {info.id}")

        await self.session.commit()
        await self.session.refresh(info)
        return info


async def seed_default_school_info(session: AsyncSession) -> Optional[SchoolInfo]:
    if await _latest(session) is not None:
        return None
    info = SchoolInfo(**DEFAULT_SCHOOL_INFO)
    session.add(info)
    await session.commit()
    logger.info("Default school info created")
    return info
