# backend/tuitiontime/services/profile_service.py
"""
Profile Service for the TuitionTime platform

Students and tutors each own one role profile. Saving a profile that
passes validation marks the user's onboarding as complete.
"""

import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from ..core.enums import KycStatus, UserRole
from ..core.exceptions import BusinessRuleException, ConflictException, ForbiddenException, NotFoundException
from ..models.profiles import StudentProfile, TutorProfile
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.profile import StudentProfileUpsert, TutorKycRequest, TutorProfileUpsert
from .base import BaseService

logger = logging.getLogger(__name__)


class ProfileService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.student_repository = RepositoryFactory.create_student_profile_repository(db)
        self.tutor_repository = RepositoryFactory.create_tutor_profile_repository(db)

    def get_profile(self, user: User) -> Dict[str, Any]:
        return {
            "user": user,
            "student_profile": self.student_repository.get_by_user_id(user.id)
            if user.is_student
            else None,
            "tutor_profile": self.tutor_repository.get_by_user_id(user.id) if user.is_tutor else None,
        }

    @BaseService.measure_operation("upsert_student_profile")
    def upsert_student_profile(self, user: User, data: StudentProfileUpsert) -> StudentProfile:
        if not user.is_student:
            raise ForbiddenException("Only students have a student profile")

        values = data.model_dump()
        profile = self.student_repository.get_by_user_id(user.id)
        with self.transaction():
            if profile is None:
                profile = self.student_repository.create(user_id=user.id, **values)
            else:
                for key, value in values.items():
                    setattr(profile, key, value)
            user.is_profile_complete = True

        self.log_operation("student_profile_saved", user_id=user.id)
        return profile

    @BaseService.measure_operation("upsert_tutor_profile")
    def upsert_tutor_profile(self, user: User, data: TutorProfileUpsert) -> TutorProfile:
        if not user.is_tutor:
            raise ForbiddenException("Only tutors have a tutor profile")

        values = data.model_dump()
        # Ratings come from students; only an explicit value overrides them.
        if values.get("rating") is None:
            values.pop("rating", None)
        profile = self.tutor_repository.get_by_user_id(user.id)
        with self.transaction():
            if profile is None:
                profile = self.tutor_repository.create(user_id=user.id, **values)
            else:
                for key, value in values.items():
                    setattr(profile, key, value)
            user.is_profile_complete = True

        self.log_operation("tutor_profile_saved", user_id=user.id)
        return profile

    @BaseService.measure_operation("submit_tutor_kyc")
    def submit_kyc(self, user: User, data: TutorKycRequest) -> TutorProfile:
        if not user.is_tutor:
            raise ForbiddenException("Only tutors can submit KYC documents")
        profile = self.tutor_repository.get_by_user_id(user.id)
        if profile is None:
            raise BusinessRuleException(
                "Complete your tutor profile before submitting KYC", code="PROFILE_INCOMPLETE"
            )
        if profile.kyc_status == KycStatus.APPROVED.value:
            raise ConflictException("KYC is already approved", code="KYC_APPROVED")

        with self.transaction():
            profile.aadhaar_urls = list(data.aadhaar_urls)
            profile.pan_url = data.pan_url
            profile.bank_proof_url = data.bank_proof_url
            profile.kyc_status = KycStatus.SUBMITTED.value
        self.logger.info(f"Tutor {user.id} submitted KYC documents")
        return profile

    def get_public_tutor(self, tutor_id: str) -> TutorProfile:
        user = self.user_repository.get_by_id(tutor_id)
        if user is None or user.role != UserRole.TUTOR.value or not user.is_active:
            raise NotFoundException("Tutor not found")
        profile = self.tutor_repository.get_by_user_id(user.id)
        if profile is None:
            raise NotFoundException("Tutor not found")
        return profile
