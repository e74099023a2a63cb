# backend/tuitiontime/services/auth_service.py
"""
Authentication Service for the TuitionTime platform

Students and tutors sign in with their phone number and a one-time code;
the admin signs in with the configured username and bcrypt password hash.
Both paths end in the same access/refresh token pair.

Refresh tokens rotate: only the SHA-256 digest of the latest token is kept
on the user, so presenting an older token after a refresh fails.
"""

from datetime import timedelta
import logging
import secrets
from typing import Any, Dict, Optional

import jwt
from sqlalchemy.orm import Session

from ..auth import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_secret,
    verify_password,
)
from ..core.config import settings
from ..core.enums import OtpPurpose, UserRole, UserStatus
from ..core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    TooManyAttemptsException,
    UnauthorizedException,
    ValidationException,
)
from ..core.timezone_utils import utcnow
from ..models.otp import OtpRequest
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

SELF_SERVICE_ROLES = (UserRole.STUDENT.value, UserRole.TUTOR.value)


class AuthService(BaseService):
    """OTP login/signup, token issue and rotation, admin login."""

    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.otp_repository = RepositoryFactory.create_otp_repository(db)
        self.notification_service = notification_service or NotificationService(db)

    # ------------------------------------------------------------------
    # OTP
    # ------------------------------------------------------------------

    @staticmethod
    def _generate_code() -> str:
        return settings.active_otp_fixed_code or f"{secrets.randbelow(10**6):06d}"

    @BaseService.measure_operation("send_otp")
    def send_otp(self, phone: str, purpose: str = OtpPurpose.LOGIN.value) -> Dict[str, Any]:
        """
        Issue a new code for ``phone``.

        Earlier unused codes for the same phone and purpose stop working.

        Returns:
            ``{"request_id", "expires_in"}``
        """
        if not (len(phone) == 10 and phone.isdigit()):
            raise ValidationException("Phone number must be exactly 10 digits")

        code = self._generate_code()
        with self.transaction():
            self.otp_repository.invalidate_open_requests(phone, purpose)
            otp = self.otp_repository.create(
                phone=phone,
                purpose=purpose,
                code_hash=hash_secret(code),
                expires_at=utcnow() + timedelta(seconds=settings.otp_ttl_seconds),
                attempts=0,
                consumed=False,
            )
            if settings.sms_enabled:
                self.notification_service.send_sms(
                    phone, f"Your TuitionTime verification code is {code}"
                )
            elif not settings.is_production:
                self.logger.info(f"OTP for {phone}: {code}")

        self.log_operation("otp_sent", phone=phone, purpose=purpose)
        return {"request_id": otp.id, "expires_in": settings.otp_ttl_seconds}

    def _check_code(self, otp: OtpRequest, code: str) -> None:
        if otp.consumed:
            raise ValidationException("OTP already used", code="OTP_USED")
        if otp.expires_at <= utcnow():
            raise ValidationException("OTP expired", code="OTP_EXPIRED")
        if otp.attempts >= settings.otp_max_attempts:
            raise TooManyAttemptsException(
                "Too many attempts, request a new code", code="OTP_ATTEMPTS_EXCEEDED"
            )
        if not secrets.compare_digest(otp.code_hash, hash_secret(code)):
            with self.transaction():
                otp.attempts += 1
            raise ValidationException(
                "Invalid OTP",
                code="OTP_INVALID",
                details={"attempts_left": max(settings.otp_max_attempts - otp.attempts, 0)},
            )

    @BaseService.measure_operation("verify_otp")
    def verify_otp(
        self,
        phone: str,
        request_id: str,
        code: str,
        purpose: str = OtpPurpose.LOGIN.value,
        role: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Exchange a valid code for tokens.

        Signup creates the user with the requested role; login requires an
        existing, active user.

        Raises:
            ValidationException: unknown request, used, expired or wrong code
            TooManyAttemptsException: attempt limit reached
            ConflictException: signup for a phone that already has an account
            NotFoundException: login for an unknown phone
            ForbiddenException: suspended account
        """
        otp = self.otp_repository.get_for_phone(request_id, phone)
        if otp is None or otp.purpose != purpose:
            raise ValidationException("Invalid request", code="OTP_REQUEST_INVALID")
        self._check_code(otp, code)

        user = self.user_repository.get_by_phone(phone)
        is_new_user = False
        if purpose == OtpPurpose.SIGNUP.value:
            if role not in SELF_SERVICE_ROLES:
                raise ValidationException("Role must be student or tutor")
            if user is not None:
                raise ConflictException("An account with this phone already exists")
        else:
            if user is None:
                raise NotFoundException("No account found for this phone")
            if not user.is_active:
                raise ForbiddenException("Account is suspended")

        with self.transaction():
            otp.consumed = True
            if user is None:
                user = self.user_repository.create(
                    phone=phone, role=role, status=UserStatus.ACTIVE.value
                )
                is_new_user = True
            tokens = self._issue_tokens(user)

        self.log_operation("otp_verified", user_id=user.id, purpose=purpose)
        return {**tokens, "is_new_user": is_new_user}

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def _issue_tokens(self, user: User) -> Dict[str, Any]:
        """Must run inside a transaction; stores the refresh digest."""
        access_token = create_access_token(user.id, user.role)
        refresh_token = create_refresh_token(user.id)
        user.refresh_token_hash = hash_secret(refresh_token)
        user.last_login = utcnow()
        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer",
            "expires_in": settings.access_token_expire_minutes * 60,
            "user": user,
        }

    @BaseService.measure_operation("refresh_tokens")
    def refresh(self, refresh_token: str) -> Dict[str, Any]:
        try:
            payload = decode_token(refresh_token, REFRESH_TOKEN_TYPE)
        except jwt.PyJWTError as e:
            self.logger.warning(f"Refresh token rejected: {str(e)}")
            raise UnauthorizedException("Invalid refresh token")

        user = self.user_repository.get_by_id(payload["sub"])
        if user is None or not user.refresh_token_hash:
            raise UnauthorizedException("Invalid refresh token")
        if not secrets.compare_digest(user.refresh_token_hash, hash_secret(refresh_token)):
            raise UnauthorizedException("Refresh token has been revoked")
        if not user.is_active:
            raise ForbiddenException("Account is suspended")

        with self.transaction():
            tokens = self._issue_tokens(user)
        return {**tokens, "is_new_user": False}

    def logout(self, user: User) -> None:
        with self.transaction():
            user.refresh_token_hash = None
        self.logger.info(f"User {user.id} logged out")

    def get_current_user(self, user_id: str) -> User:
        user = self.user_repository.get_with_profiles(user_id)
        if user is None:
            raise NotFoundException("User not found")
        return user

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    @BaseService.measure_operation("admin_login")
    def admin_login(self, username: str, password: str) -> Dict[str, Any]:
        expected_hash = settings.admin_password_hash.get_secret_value()
        if username != settings.admin_username or not verify_password(password, expected_hash):
            self.logger.warning(f"Failed admin login for '{username}'")
            raise UnauthorizedException("Invalid credentials")

        user = self.user_repository.get_by_username(username)
        with self.transaction():
            if user is None:
                user = self.user_repository.create(
                    username=username, role=UserRole.ADMIN.value, status=UserStatus.ACTIVE.value
                )
                self.logger.info(f"Created admin user {user.id}")
            tokens = self._issue_tokens(user)
        return {**tokens, "is_new_user": False}
