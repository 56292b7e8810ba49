"""
ClientHub Backend - Authentication Route Handlers
==================================================

What:  POST /api/login, POST /api/logout, POST /api/change-password.
How:   Thin handlers; AuthService does validation, hashing and token work.
Who:   Called by the admin UI's login screen and account menu.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clienthub.database import get_db_session
from clienthub.dependencies import require_admin
from clienthub.schemas.auth import ChangePasswordRequest, LoginRequest, LoginResponse, LogoutRequest
from clienthub.schemas.common import ErrorResponse, MessageResponse
from clienthub.services.auth_service import auth_service
from clienthub.services.security import TokenIdentity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Username or password missing", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Exchange administrator credentials for a bearer token",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    return await auth_service.login(db, payload.username, payload.password)


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={400: {"description": "Username missing", "model": ErrorResponse}},
    summary="Record a logout; tokens issued before it stop working",
)
async def logout(
    payload: LogoutRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await auth_service.logout(db, payload.username)
    return MessageResponse(message="Logout successful")


@router.post(
    "/change-password",
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing fields or new password too short", "model": ErrorResponse},
        401: {"description": "Missing token or wrong current password", "model": ErrorResponse},
        403: {"description": "Invalid token", "model": ErrorResponse},
        404: {"description": "Administrator not found", "model": ErrorResponse},
    },
    summary="Change the authenticated administrator's password",
)
async def change_password(
    payload: ChangePasswordRequest,
    admin: TokenIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await auth_service.change_password(
        db,
        username=admin.username,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return MessageResponse(message="Password updated successfully")
