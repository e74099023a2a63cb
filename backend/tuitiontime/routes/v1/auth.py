# backend/tuitiontime/routes/v1/auth.py
"""
Authentication routes - API v1

Phone + OTP sign in for students and tutors, username + password for the
platform admin. Access tokens are short lived JWTs; refresh tokens rotate
on every use.

Endpoints:
    POST /otp/send - Send a one-time code to a phone number
    POST /otp/verify - Exchange a code for tokens (signup or login)
    POST /refresh - Rotate the refresh token
    POST /logout - Revoke the current refresh token
    GET /me - Current user
    POST /admin/login - Admin credentials login
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_current_active_user
from ...api.dependencies.services import get_auth_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.auth import (
    AdminLoginRequest,
    RefreshRequest,
    SendOtpRequest,
    SendOtpResponse,
    TokenResponse,
    UserResponse,
    VerifyOtpRequest,
)
from ...schemas.base import SuccessResponse
from ...services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth-v1"])


@router.post("/otp/send", response_model=SendOtpResponse)
async def send_otp(
    payload: SendOtpRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> SendOtpResponse:
    try:
        result = await asyncio.to_thread(auth_service.send_otp, payload.phone, payload.purpose)
        return SendOtpResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/otp/verify", response_model=TokenResponse)
async def verify_otp(
    payload: VerifyOtpRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Verify the code; signup requires ``role`` to be student or tutor."""
    try:
        result = await asyncio.to_thread(
            auth_service.verify_otp,
            payload.phone,
            payload.request_id,
            payload.code,
            payload.purpose,
            payload.role,
        )
        return TokenResponse.model_validate(result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_tokens(
    payload: RefreshRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    try:
        result = await asyncio.to_thread(auth_service.refresh, payload.refresh_token)
        return TokenResponse.model_validate(result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/logout", response_model=SuccessResponse, status_code=status.HTTP_200_OK)
async def logout(
    current_user: User = Depends(get_current_active_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    await asyncio.to_thread(auth_service.logout, current_user)
    return SuccessResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
async def read_users_me(current_user: User = Depends(get_current_active_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.post("/admin/login", response_model=TokenResponse)
async def admin_login(
    payload: AdminLoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    try:
        result = await asyncio.to_thread(auth_service.admin_login, payload.username, payload.password)
        return TokenResponse.model_validate(result)
    except DomainException as e:
        handle_domain_exception(e)
