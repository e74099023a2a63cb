# backend/tuitiontime/services/tutor_switch_service.py
"""Requests from students to move a regular class to a different tutor."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import SwitchRequestStatus, UserRole
from ..core.exceptions import ConflictException, NotFoundException, ValidationException
from ..models.tutor_switch import TutorSwitchRequest
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.tutor_switch import TutorSwitchCreate, TutorSwitchUpdate
from .admin_notification_service import AdminNotificationService
from .base import BaseService

logger = logging.getLogger(__name__)


class TutorSwitchService(BaseService):
    def __init__(
        self,
        db: Session,
        admin_notification_service: Optional[AdminNotificationService] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_tutor_switch_repository(db)
        self.class_repository = RepositoryFactory.create_regular_class_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.admin_notifications = admin_notification_service or AdminNotificationService(db)

    @BaseService.measure_operation("create_tutor_switch")
    def create_request(self, student: User, data: TutorSwitchCreate) -> TutorSwitchRequest:
        regular_class = self.class_repository.get_by_id(data.regular_class_id)
        if regular_class is None or regular_class.student_id != student.id:
            raise NotFoundException("Regular class not found")
        if self.repository.has_open_request(regular_class.id):
            raise ConflictException(
                "A switch request for this class is already open", code="SWITCH_REQUEST_OPEN"
            )

        with self.transaction():
            request = self.repository.create(
                student_id=student.id,
                regular_class_id=regular_class.id,
                from_tutor_id=regular_class.tutor_id,
                reason=data.reason,
                status=SwitchRequestStatus.OPEN.value,
            )
            self.admin_notifications.notify(
                "Tutor switch requested",
                f"{student.display_name} asked to switch tutor for {regular_class.subject}",
                {"request_id": request.id, "regular_class_id": regular_class.id},
            )
        return request

    def list_for_student(self, student: User) -> List[TutorSwitchRequest]:
        return self.repository.list_for_student(student.id)

    def list_all(self, status: Optional[str] = None) -> List[TutorSwitchRequest]:
        return self.repository.list_all(status)

    @BaseService.measure_operation("update_tutor_switch")
    def update_request(self, request_id: str, data: TutorSwitchUpdate) -> TutorSwitchRequest:
        request = self.repository.get_by_id(request_id)
        if request is None:
            raise NotFoundException("Switch request not found")
        if data.to_tutor_id:
            tutor = self.user_repository.get_by_id(data.to_tutor_id)
            if tutor is None or tutor.role != UserRole.TUTOR.value:
                raise ValidationException("to_tutor_id must reference a tutor")
            if tutor.id == request.from_tutor_id:
                raise ValidationException("New tutor must differ from the current tutor")

        with self.transaction():
            request.status = data.status
            if data.to_tutor_id:
                request.to_tutor_id = data.to_tutor_id
            if data.admin_note is not None:
                request.admin_note = data.admin_note
        self.log_operation("tutor_switch_updated", request_id=request.id, status=request.status)
        return request
