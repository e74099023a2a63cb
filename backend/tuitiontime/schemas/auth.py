# backend/tuitiontime/schemas/auth.py
"""Authentication schemas: OTP exchange, tokens and the current user."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..core.constants import PHONE_PATTERN
from ..core.enums import OtpPurpose, UserRole
from .base import StandardizedModel, StrictRequestModel


class SendOtpRequest(StrictRequestModel):
    phone: str = Field(..., pattern=PHONE_PATTERN, description="10-digit mobile number")
    purpose: OtpPurpose = OtpPurpose.LOGIN


class SendOtpResponse(BaseModel):
    request_id: str
    expires_in: int = Field(description="Seconds until the code expires")


class VerifyOtpRequest(StrictRequestModel):
    phone: str = Field(..., pattern=PHONE_PATTERN)
    request_id: str = Field(..., min_length=1)
    code: str = Field(..., min_length=4, max_length=8)
    purpose: OtpPurpose = OtpPurpose.LOGIN
    role: Optional[UserRole] = None

    @field_validator("code")
    @classmethod
    def code_is_numeric(cls, value: str) -> str:
        value = value.strip()
        if not value.isdigit():
            raise ValueError("OTP must contain digits only")
        return value


class RefreshRequest(StrictRequestModel):
    refresh_token: str = Field(..., min_length=1)


class AdminLoginRequest(StrictRequestModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(StandardizedModel):
    id: str
    phone: Optional[str] = None
    username: Optional[str] = None
    role: str
    status: str
    is_profile_complete: bool
    last_login: Optional[datetime] = None
    created_at: datetime


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
    is_new_user: bool = False
