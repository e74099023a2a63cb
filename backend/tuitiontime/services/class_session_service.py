# backend/tuitiontime/services/class_session_service.py
"""
Class Session Service for the TuitionTime platform

Tutors schedule individual sessions of a paid regular class. A session
must fall on one of the dates the tutor published in their profile and
must not clash with either participant's calendar.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.enums import Attendance, RegularClassStatus, SessionStatus
from ..core.exceptions import (
    BusinessRuleException,
    DomainException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..core.ulid_helper import generate_ulid
from ..models.regular_class import ClassSession, RegularClass
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.regular_class import SessionSlot
from .admin_notification_service import AdminNotificationService
from .base import BaseService
from .conflict_checker import ConflictChecker
from .meeting import meeting_link

logger = logging.getLogger(__name__)

DEFAULT_SESSION_MINUTES = 60


def session_window(slot: SessionSlot) -> Tuple[datetime, datetime]:
    """UTC start and end of a requested session."""
    hours, minutes = (int(part) for part in slot.start_time.split(":"))
    start = datetime(
        slot.date.year, slot.date.month, slot.date.day, hours, minutes, tzinfo=timezone.utc
    )
    if slot.end_time:
        end_hours, end_minutes = (int(part) for part in slot.end_time.split(":"))
        end = start.replace(hour=end_hours, minute=end_minutes)
    else:
        end = start + timedelta(minutes=DEFAULT_SESSION_MINUTES)
    if end <= start:
        raise ValidationException("Session end time must be after start time")
    return start, end


class ClassSessionService(BaseService):
    def __init__(
        self,
        db: Session,
        admin_notification_service: Optional[AdminNotificationService] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_class_session_repository(db)
        self.class_repository = RepositoryFactory.create_regular_class_repository(db)
        self.tutor_profile_repository = RepositoryFactory.create_tutor_profile_repository(db)
        self.conflict_checker = ConflictChecker(db)
        self.admin_notifications = admin_notification_service or AdminNotificationService(db)

    def _schedulable_class(self, tutor: User, regular_class_id: str) -> RegularClass:
        regular_class = self.class_repository.get_by_id(regular_class_id)
        if regular_class is None:
            raise NotFoundException("Regular class not found")
        if regular_class.tutor_id != tutor.id:
            raise ForbiddenException("You can only schedule sessions for your own classes")
        if not regular_class.is_paid:
            raise BusinessRuleException(
                "Sessions can be scheduled only after the class is paid", code="CLASS_NOT_PAID"
            )
        if regular_class.status != RegularClassStatus.ACTIVE.value:
            raise BusinessRuleException("Class is not active", details={"status": regular_class.status})
        return regular_class

    def _available_dates(self, tutor: User) -> List[str]:
        profile = self.tutor_profile_repository.get_by_user_id(tutor.id)
        return list(profile.availability or []) if profile is not None else []

    def _schedule(
        self, tutor: User, regular_class: RegularClass, slot: SessionSlot, available: Sequence[str]
    ) -> ClassSession:
        if slot.date.isoformat() not in available:
            raise BusinessRuleException(
                "Tutor is not available on this date",
                code="DATE_NOT_AVAILABLE",
                details={"date": slot.date.isoformat()},
            )
        start, end = session_window(slot)
        self.conflict_checker.ensure_no_conflicts(
            tutor_id=tutor.id,
            student_id=regular_class.student_id,
            start_time=start,
            end_time=end,
        )
        session_id = generate_ulid()
        return self.repository.create(
            id=session_id,
            regular_class_id=regular_class.id,
            tutor_id=tutor.id,
            student_id=regular_class.student_id,
            start_datetime=start,
            end_datetime=end,
            meeting_link=meeting_link(session_id),
            status=SessionStatus.SCHEDULED.value,
            attendance=Attendance.NOT_MARKED.value,
        )

    @BaseService.measure_operation("create_class_session")
    def create_session(self, tutor: User, regular_class_id: str, slot: SessionSlot) -> ClassSession:
        regular_class = self._schedulable_class(tutor, regular_class_id)
        with self.transaction():
            session = self._schedule(tutor, regular_class, slot, self._available_dates(tutor))
        self.log_operation("class_session_created", session_id=session.id)
        return session

    @BaseService.measure_operation("bulk_create_class_sessions")
    def bulk_create(
        self, tutor: User, regular_class_id: str, slots: Sequence[SessionSlot]
    ) -> Dict[str, Any]:
        """
        Schedule many sessions at once.

        Rows that fail validation or clash with the calendar are reported in
        ``skipped`` with their index; the rest are created together.
        """
        regular_class = self._schedulable_class(tutor, regular_class_id)
        available = self._available_dates(tutor)
        created: List[ClassSession] = []
        skipped: List[Dict[str, Any]] = []
        with self.transaction():
            for index, slot in enumerate(slots):
                try:
                    created.append(self._schedule(tutor, regular_class, slot, available))
                except DomainException as e:
                    skipped.append({"index": index, "reason": e.message})
        self.log_operation(
            "class_sessions_bulk_created",
            regular_class_id=regular_class.id,
            created_count=len(created),
            skipped_count=len(skipped),
        )
        return {"created": created, "skipped": skipped}

    def student_sessions(self, student: User) -> List[ClassSession]:
        return self.repository.list_for_student(student.id)

    def tutor_sessions(self, tutor: User, regular_class_id: Optional[str] = None) -> List[ClassSession]:
        return self.repository.list_for_tutor(tutor.id, regular_class_id)

    @BaseService.measure_operation("mark_attendance")
    def mark_attendance(
        self, tutor: User, session_id: str, attendance: str, tutor_notes: Optional[str] = None
    ) -> ClassSession:
        session = self.repository.get_by_id(session_id)
        if session is None:
            raise NotFoundException("Session not found")
        if session.tutor_id != tutor.id:
            raise ForbiddenException("You can only mark attendance for your own sessions")
        if session.status == SessionStatus.CANCELLED.value:
            raise BusinessRuleException("Cannot mark attendance for a cancelled session")

        with self.transaction():
            session.attendance = attendance
            session.tutor_notes = tutor_notes
            session.status = SessionStatus.COMPLETED.value
            self.admin_notifications.notify(
                "Session attendance marked",
                f"{tutor.display_name} marked session {session.id} as {attendance}",
                {"session_id": session.id, "attendance": attendance},
            )
        return session
