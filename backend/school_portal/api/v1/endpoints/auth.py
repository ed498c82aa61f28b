"""
Authentication endpoints
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from loguru import logger

from school_portal.api.dependencies import get_auth_service, get_current_user
from school_portal.core.config import settings
from school_portal.domains.accounts import AuthService
from school_portal.domains.accounts.service import public_user
from school_portal.models import User
from school_portal.models.user import ChangePasswordSchema, LoginSchema

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Dict[str, Any])
async def login(payload: LoginSchema, auth: AuthService = Depends(get_auth_service)):
    logger.info(f"Login attempt for {payload.username}")
    token, user = await auth.login(payload.username, payload.password)
    return {
        "token": token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "user": public_user(user),
    }


@router.get("/verify", response_model=Dict[str, Any])
async def verify_token(current_user: User = Depends(get_current_user)):
    return {"valid": True, "user": public_user(current_user)}


@router.post("/change-password", response_model=Dict[str, Any])
async def change_password(
    payload: ChangePasswordSchema,
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    logger.info(f"Password change requested by {current_user.username}")
    await auth.change_password(current_user, payload.model_dump())
    return {"success": True, "message": "Password changed"}
