"""
School profile endpoints
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from loguru import logger

from school_portal.api.dependencies import get_current_user, get_school_service
from school_portal.domains.school import SchoolInfoService
from school_portal.models import User
from school_portal.models.school import SchoolInfoResponseSchema

router = APIRouter(prefix="/school", tags=["school"])


@router.get("/info", response_model=SchoolInfoResponseSchema)
async def get_school_info(service: SchoolInfoService = Depends(get_school_service)):
    return await service.get()


@router.put("/info", response_model=SchoolInfoResponseSchema)
async def update_school_info(
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    service: SchoolInfoService = Depends(get_school_service),
):
    logger.info(f"School profile update by {current_user.username}")
    return await service.upsert(payload)
