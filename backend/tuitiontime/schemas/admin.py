# backend/tuitiontime/schemas/admin.py
from typing import Literal, Optional

from pydantic import BaseModel

from ..core.enums import KycStatus
from .auth import UserResponse
from .base import StrictRequestModel
from .profile import StudentProfileResponse, TutorProfileResponse


class AdminUserResponse(UserResponse):
    """User row merged with whichever role profile it has."""

    student_profile: Optional[StudentProfileResponse] = None
    tutor_profile: Optional[TutorProfileResponse] = None


class UserStatusUpdate(StrictRequestModel):
    status: Literal["active", "suspended"]


class TutorVerifyRequest(StrictRequestModel):
    is_verified: bool


class KycUpdateRequest(StrictRequestModel):
    kyc_status: KycStatus


class MarkedReadResponse(BaseModel):
    updated: int
