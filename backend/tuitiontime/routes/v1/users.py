# backend/tuitiontime/routes/v1/users.py
"""
Profile routes - API v1

Endpoints:
    GET /profile - Current user with their role profile
    PUT /student-profile - Create or replace the student profile
    PUT /tutor-profile - Create or replace the tutor profile
    POST /tutor-kyc - Submit KYC documents for review
"""

import asyncio
import logging

from fastapi import APIRouter, Depends

from ...api.dependencies import get_current_active_user, require_student, require_tutor
from ...api.dependencies.services import get_profile_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.profile import (
    ProfileResponse,
    StudentProfileResponse,
    StudentProfileUpsert,
    TutorKycRequest,
    TutorProfileResponse,
    TutorProfileUpsert,
)
from ...services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users-v1"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_active_user),
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    profile = await asyncio.to_thread(profile_service.get_profile, current_user)
    return ProfileResponse.model_validate(profile)


@router.put("/student-profile", response_model=StudentProfileResponse)
async def upsert_student_profile(
    payload: StudentProfileUpsert,
    current_user: User = Depends(require_student),
    profile_service: ProfileService = Depends(get_profile_service),
) -> StudentProfileResponse:
    try:
        profile = await asyncio.to_thread(
            profile_service.upsert_student_profile, current_user, payload
        )
        return StudentProfileResponse.model_validate(profile)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/tutor-profile", response_model=TutorProfileResponse)
async def upsert_tutor_profile(
    payload: TutorProfileUpsert,
    current_user: User = Depends(require_tutor),
    profile_service: ProfileService = Depends(get_profile_service),
) -> TutorProfileResponse:
    try:
        profile = await asyncio.to_thread(profile_service.upsert_tutor_profile, current_user, payload)
        return TutorProfileResponse.model_validate(profile)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/tutor-kyc", response_model=TutorProfileResponse)
async def submit_tutor_kyc(
    payload: TutorKycRequest,
    current_user: User = Depends(require_tutor),
    profile_service: ProfileService = Depends(get_profile_service),
) -> TutorProfileResponse:
    try:
        profile = await asyncio.to_thread(profile_service.submit_kyc, current_user, payload)
        return TutorProfileResponse.model_validate(profile)
    except DomainException as e:
        handle_domain_exception(e)
