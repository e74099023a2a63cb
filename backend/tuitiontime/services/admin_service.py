# backend/tuitiontime/services/admin_service.py
"""
Admin Service for the TuitionTime platform

User moderation and tutor verification. KYC decisions drive the tutor's
verification flag, which is what makes a tutor visible in search.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.enums import KycStatus, TutorStatus, UserStatus
from ..core.exceptions import BusinessRuleException, NotFoundException, ValidationException
from ..models.profiles import TutorProfile
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class AdminService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.tutor_repository = RepositoryFactory.create_tutor_profile_repository(db)

    def list_users(
        self,
        *,
        role: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[User], int]:
        return self.user_repository.list_with_profiles(
            role=role, status=status, page=page, per_page=per_page
        )

    def get_user(self, user_id: str) -> User:
        user = self.user_repository.get_with_profiles(user_id)
        if user is None:
            raise NotFoundException("User not found")
        return user

    @BaseService.measure_operation("admin_update_user_status")
    def update_user_status(self, admin: User, user_id: str, status: str) -> User:
        if status not in (UserStatus.ACTIVE.value, UserStatus.SUSPENDED.value):
            raise ValidationException("Status must be active or suspended")
        user = self.get_user(user_id)
        if user.id == admin.id:
            raise BusinessRuleException("Admins cannot change their own status")
        with self.transaction():
            user.status = status
            if status == UserStatus.SUSPENDED.value:
                user.refresh_token_hash = None
        self.log_operation("user_status_updated", user_id=user.id, status=status)
        return user

    def _tutor_profile(self, tutor_id: str) -> TutorProfile:
        profile = self.tutor_repository.get_by_user_id(tutor_id)
        if profile is None:
            raise NotFoundException("Tutor profile not found")
        return profile

    @BaseService.measure_operation("admin_verify_tutor")
    def verify_tutor(self, tutor_id: str, is_verified: bool) -> TutorProfile:
        profile = self._tutor_profile(tutor_id)
        with self.transaction():
            profile.is_verified = is_verified
        self.log_operation("tutor_verification_set", tutor_id=tutor_id, is_verified=is_verified)
        return profile

    @BaseService.measure_operation("admin_update_kyc")
    def update_kyc(self, tutor_id: str, kyc_status: str) -> TutorProfile:
        """
        Record a KYC decision.

        Approval verifies the tutor and rejection hides them from search.
        """
        if kyc_status not in {status.value for status in KycStatus}:
            raise ValidationException(f"Unknown KYC status '{kyc_status}'")
        profile = self._tutor_profile(tutor_id)
        with self.transaction():
            profile.kyc_status = kyc_status
            if kyc_status == KycStatus.APPROVED.value:
                profile.is_verified = True
                profile.status = TutorStatus.APPROVED.value
            elif kyc_status == KycStatus.REJECTED.value:
                profile.is_verified = False
                profile.status = TutorStatus.REJECTED.value
        self.log_operation("tutor_kyc_updated", tutor_id=tutor_id, kyc_status=kyc_status)
        return profile

    def list_tutors_for_kyc(
        self, *, kyc_status: Optional[str] = None, page: int = 1, per_page: int = 20
    ) -> Tuple[List[TutorProfile], int]:
        return self.tutor_repository.list_for_kyc(kyc_status=kyc_status, page=page, per_page=per_page)
