"""
Version 1 API router configuration.
"""

from fastapi import APIRouter

from school_portal.api.v1.endpoints import auth, news, school, students

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router)
api_router.include_router(news.router)
api_router.include_router(students.router)
api_router.include_router(school.router)
