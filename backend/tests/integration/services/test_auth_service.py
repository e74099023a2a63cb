from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

from tuitiontime.core.config import settings
from tuitiontime.core.enums import UserStatus
from tuitiontime.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    TooManyAttemptsException,
    UnauthorizedException,
    ValidationException,
)
from tuitiontime.core.timezone_utils import utcnow
from tuitiontime.models.otp import OtpRequest
from tuitiontime.models.user import User
from tuitiontime.services.auth_service import AuthService

from tests.helpers.builders import ADMIN_PASSWORD

FIXED_CODE = "123456"


@pytest.fixture
def auth_service(db: Session) -> AuthService:
    return AuthService(db)


class TestOtp:
    def test_rejects_malformed_phone(self, auth_service: AuthService) -> None:
        with pytest.raises(ValidationException):
            auth_service.send_otp("12345")

    def test_signup_creates_user(self, auth_service: AuthService) -> None:
        sent = auth_service.send_otp("9123456789", "signup")
        result = auth_service.verify_otp("9123456789", sent["request_id"], FIXED_CODE, "signup", "tutor")

        assert result["is_new_user"] is True
        assert result["user"].role == "tutor"
        assert result["token_type"] == "bearer"

    def test_signup_for_existing_phone_conflicts(
        self, auth_service: AuthService, student: User
    ) -> None:
        sent = auth_service.send_otp(student.phone, "signup")
        with pytest.raises(ConflictException):
            auth_service.verify_otp(student.phone, sent["request_id"], FIXED_CODE, "signup", "student")

    def test_login_requires_existing_account(self, auth_service: AuthService) -> None:
        sent = auth_service.send_otp("9999999999")
        with pytest.raises(NotFoundException):
            auth_service.verify_otp("9999999999", sent["request_id"], FIXED_CODE)

    def test_code_is_single_use(self, auth_service: AuthService, student: User) -> None:
        sent = auth_service.send_otp(student.phone)
        auth_service.verify_otp(student.phone, sent["request_id"], FIXED_CODE)
        with pytest.raises(ValidationException) as exc_info:
            auth_service.verify_otp(student.phone, sent["request_id"], FIXED_CODE)
        assert exc_info.value.code == "OTP_USED"

    def test_new_code_invalidates_previous_one(
        self, auth_service: AuthService, student: User
    ) -> None:
        first = auth_service.send_otp(student.phone)
        auth_service.send_otp(student.phone)
        with pytest.raises(ValidationException):
            auth_service.verify_otp(student.phone, first["request_id"], FIXED_CODE)

    def test_attempts_are_limited(self, auth_service: AuthService, student: User) -> None:
        sent = auth_service.send_otp(student.phone)
        for _ in range(settings.otp_max_attempts):
            with pytest.raises(ValidationException):
                auth_service.verify_otp(student.phone, sent["request_id"], "000000")

        with pytest.raises(TooManyAttemptsException):
            auth_service.verify_otp(student.phone, sent["request_id"], FIXED_CODE)

    def test_expired_code_is_rejected(
        self, auth_service: AuthService, db: Session, student: User
    ) -> None:
        sent = auth_service.send_otp(student.phone)
        otp = db.get(OtpRequest, sent["request_id"])
        otp.expires_at = utcnow() - timedelta(seconds=1)
        db.commit()

        with pytest.raises(ValidationException) as exc_info:
            auth_service.verify_otp(student.phone, sent["request_id"], FIXED_CODE)
        assert exc_info.value.message == "OTP expired"
        assert exc_info.value.code == "OTP_EXPIRED"

    def test_suspended_user_cannot_log_in(
        self, auth_service: AuthService, db: Session, student: User
    ) -> None:
        student.status = UserStatus.SUSPENDED.value
        db.commit()
        sent = auth_service.send_otp(student.phone)

        with pytest.raises(ForbiddenException):
            auth_service.verify_otp(student.phone, sent["request_id"], FIXED_CODE)
        assert db.get(OtpRequest, sent["request_id"]).consumed is False


class TestTokens:
    def test_refresh_rotates_tokens(self, auth_service: AuthService, student: User) -> None:
        sent = auth_service.send_otp(student.phone)
        issued = auth_service.verify_otp(student.phone, sent["request_id"], FIXED_CODE)

        rotated = auth_service.refresh(issued["refresh_token"])

        assert rotated["refresh_token"] != issued["refresh_token"]
        with pytest.raises(UnauthorizedException):
            auth_service.refresh(issued["refresh_token"])

    def test_access_token_cannot_refresh(self, auth_service: AuthService, student: User) -> None:
        sent = auth_service.send_otp(student.phone)
        issued = auth_service.verify_otp(student.phone, sent["request_id"], FIXED_CODE)
        with pytest.raises(UnauthorizedException):
            auth_service.refresh(issued["access_token"])

    def test_logout_revokes_refresh_token(self, auth_service: AuthService, student: User) -> None:
        sent = auth_service.send_otp(student.phone)
        issued = auth_service.verify_otp(student.phone, sent["request_id"], FIXED_CODE)

        auth_service.logout(issued["user"])

        with pytest.raises(UnauthorizedException):
            auth_service.refresh(issued["refresh_token"])


class TestAdminLogin:
    def test_first_login_creates_admin(self, auth_service: AuthService) -> None:
        result = auth_service.admin_login("admin", ADMIN_PASSWORD)
        assert result["user"].role == "admin"
        assert result["user"].username == "admin"

    def test_wrong_password(self, auth_service: AuthService) -> None:
        with pytest.raises(UnauthorizedException):
            auth_service.admin_login("admin", "nope")
