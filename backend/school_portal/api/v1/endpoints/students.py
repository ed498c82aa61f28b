"""
Student graduation record endpoints
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from loguru import logger

from school_portal.api.dependencies import get_current_user, get_student_service
from school_portal.domains.students import StudentService
from school_portal.models import Student, User

router = APIRouter(prefix="/students", tags=["students"])


def _score(student: Student) -> Optional[float]:
    return float(student.average_score) if student.average_score is not None else None


def serialize_graduation_result(student: Student) -> Dict[str, Any]:
    return {
        "name": student.name,
        "nisn": student.nisn,
        "class_name": student.class_name,
        "is_graduated": student.is_graduated,
        "average_score": _score(student),
        "notes": student.notes,
    }


def serialize_student(student: Student) -> Dict[str, Any]:
    return {
        "id": student.id,
        **serialize_graduation_result(student),
        "created_at": student.created_at.isoformat() if student.created_at else None,
        "updated_at": student.updated_at.isoformat() if student.updated_at else None,
    }


@router.get("/check", response_model=List[Dict[str, Any]])
async def check_graduation(
    search: Optional[str] = Query(None, description="Student name or NISN"),
    service: StudentService = Depends(get_student_service),
):
    """Public graduation lookup."""
    logger.info(f"Graduation check: {search}")
    students = await service.check_graduation(search)
    return [serialize_graduation_result(student) for student in students]


@router.get("/stats", response_model=Dict[str, Any])
async def graduation_stats(
    current_user: User = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    return await service.graduation_stats()


@router.get("", response_model=Dict[str, Any])
async def list_students(
    page: int = Query(1),
    limit: int = Query(10),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    logger.info(f"Student list by {current_user.username}: page={page}, search={search}")
    students, pagination = await service.list_students(page=page, limit=limit, search=search)
    return {
        "items": [serialize_student(student) for student in students],
        "pagination": pagination.to_dict(),
    }


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    logger.info(f"Create student by {current_user.username}: {payload.get('nisn')}")
    return serialize_student(await service.create(payload))


@router.put("/{student_id}", response_model=Dict[str, Any])
async def update_student(
    student_id: int,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    logger.info(f"Update student {student_id} by {current_user.username}")
    return serialize_student(await service.update(student_id, payload))


@router.delete("/{student_id}", response_model=Dict[str, Any])
async def delete_student(
    student_id: int,
    current_user: User = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    logger.info(f"Delete student {student_id} by {current_user.username}")
    await service.delete(student_id)
    return {"success": True, "message": "Student deleted"}
