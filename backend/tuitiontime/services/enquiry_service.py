# backend/tuitiontime/services/enquiry_service.py
"""Student-to-tutor enquiries sent before a booking."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import EnquiryStatus, UserRole
from ..core.exceptions import BusinessRuleException, ForbiddenException, NotFoundException
from ..core.timezone_utils import utcnow
from ..models.enquiry import Enquiry
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.enquiry import EnquiryCreate
from .base import BaseService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class EnquiryService(BaseService):
    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.repository = RepositoryFactory.create_enquiry_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.notification_service = notification_service or NotificationService(db)

    @BaseService.measure_operation("create_enquiry")
    def create_enquiry(self, student: User, data: EnquiryCreate) -> Enquiry:
        if not student.is_student:
            raise ForbiddenException("Only students can send enquiries")
        tutor = self.user_repository.get_with_profiles(data.tutor_id)
        if tutor is None or tutor.role != UserRole.TUTOR.value:
            raise NotFoundException("Tutor not found")

        with self.transaction():
            enquiry = self.repository.create(
                student_id=student.id,
                tutor_id=tutor.id,
                subject=data.subject,
                message=data.message,
                status=EnquiryStatus.OPEN.value,
            )
            self.notification_service.enquiry_received(enquiry, student, tutor)
        return enquiry

    def list_for_student(self, student: User) -> List[Enquiry]:
        return self.repository.list_for_student(student.id)

    def list_for_tutor(self, tutor: User, status: Optional[str] = None) -> List[Enquiry]:
        return self.repository.list_for_tutor(tutor.id, status)

    @BaseService.measure_operation("reply_enquiry")
    def reply(self, tutor: User, enquiry_id: str, reply: str) -> Enquiry:
        enquiry = self.repository.get_by_id(enquiry_id)
        if enquiry is None:
            raise NotFoundException("Enquiry not found")
        if enquiry.tutor_id != tutor.id:
            raise ForbiddenException("You can only reply to your own enquiries")
        if enquiry.status == EnquiryStatus.CLOSED.value:
            raise BusinessRuleException("Enquiry is closed")

        student = self.user_repository.get_with_profiles(enquiry.student_id)
        with self.transaction():
            enquiry.reply = reply
            enquiry.replied_at = utcnow()
            enquiry.status = EnquiryStatus.REPLIED.value
            if student is not None:
                self.notification_service.enquiry_replied(enquiry, student, tutor)
        return enquiry

    def close(self, user: User, enquiry_id: str) -> Enquiry:
        enquiry = self.repository.get_by_id(enquiry_id)
        if enquiry is None:
            raise NotFoundException("Enquiry not found")
        if user.id not in (enquiry.student_id, enquiry.tutor_id):
            raise ForbiddenException("You cannot close this enquiry")
        with self.transaction():
            enquiry.status = EnquiryStatus.CLOSED.value
        return enquiry
