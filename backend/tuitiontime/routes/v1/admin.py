# backend/tuitiontime/routes/v1/admin.py
"""
Admin routes - API v1

User moderation and tutor verification. Every endpoint requires the
admin role.

Endpoints:
    GET /users - Users with their profiles, filtered by role and status
    GET /users/{user_id} - One user with profiles
    PATCH /users/{user_id}/status - Activate or suspend a user
    GET /tutors/kyc - Tutor profiles with KYC details
    PATCH /tutors/{tutor_id}/verify - Set the verified flag
    PATCH /tutors/{tutor_id}/kyc - Record a KYC decision
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import require_admin
from ...api.dependencies.services import get_admin_service
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...core.enums import KycStatus, UserRole, UserStatus
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.admin import (
    AdminUserResponse,
    KycUpdateRequest,
    TutorVerifyRequest,
    UserStatusUpdate,
)
from ...schemas.base import PaginatedResponse
from ...schemas.profile import TutorProfileResponse
from ...services.admin_service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin-v1"])


@router.get("/users", response_model=PaginatedResponse[AdminUserResponse])
async def list_users(
    role: Optional[UserRole] = Query(None),
    status_filter: Optional[UserStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    _: User = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> PaginatedResponse[AdminUserResponse]:
    users, total = await asyncio.to_thread(
        admin_service.list_users,
        role=role.value if role else None,
        status=status_filter.value if status_filter else None,
        page=page,
        per_page=per_page,
    )
    return PaginatedResponse[AdminUserResponse].from_page(
        items=[AdminUserResponse.model_validate(user) for user in users],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/users/{user_id}", response_model=AdminUserResponse)
async def get_user(
    user_id: str,
    _: User = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> AdminUserResponse:
    try:
        user = await asyncio.to_thread(admin_service.get_user, user_id)
        return AdminUserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/users/{user_id}/status", response_model=AdminUserResponse)
async def update_user_status(
    user_id: str,
    payload: UserStatusUpdate,
    current_user: User = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> AdminUserResponse:
    try:
        user = await asyncio.to_thread(
            admin_service.update_user_status, current_user, user_id, payload.status
        )
        return AdminUserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/tutors/kyc", response_model=PaginatedResponse[TutorProfileResponse])
async def list_tutors_for_kyc(
    kyc_status: Optional[KycStatus] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    _: User = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> PaginatedResponse[TutorProfileResponse]:
    profiles, total = await asyncio.to_thread(
        admin_service.list_tutors_for_kyc,
        kyc_status=kyc_status.value if kyc_status else None,
        page=page,
        per_page=per_page,
    )
    return PaginatedResponse[TutorProfileResponse].from_page(
        items=[TutorProfileResponse.model_validate(profile) for profile in profiles],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.patch("/tutors/{tutor_id}/verify", response_model=TutorProfileResponse)
async def verify_tutor(
    tutor_id: str,
    payload: TutorVerifyRequest,
    _: User = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> TutorProfileResponse:
    try:
        profile = await asyncio.to_thread(admin_service.verify_tutor, tutor_id, payload.is_verified)
        return TutorProfileResponse.model_validate(profile)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/tutors/{tutor_id}/kyc", response_model=TutorProfileResponse)
async def update_tutor_kyc(
    tutor_id: str,
    payload: KycUpdateRequest,
    _: User = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> TutorProfileResponse:
    try:
        profile = await asyncio.to_thread(admin_service.update_kyc, tutor_id, payload.kyc_status)
        return TutorProfileResponse.model_validate(profile)
    except DomainException as e:
        handle_domain_exception(e)
