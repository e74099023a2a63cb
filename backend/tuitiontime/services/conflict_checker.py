# backend/tuitiontime/services/conflict_checker.py
"""
Conflict Checker Service for the TuitionTime platform

Detects calendar clashes for tutors and students. A calendar is the union
of bookings that still occupy time (pending or confirmed) and scheduled
sessions of regular classes. Ranges are half-open, so back-to-back
classes do not conflict.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import BookingConflictException
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

TUTOR_CONFLICT_MESSAGE = "Tutor already has a class that overlaps this time"
STUDENT_CONFLICT_MESSAGE = "Student already has a class that overlaps this time"


class ConflictChecker(BaseService):
    """Calendar overlap checks across bookings and class sessions."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.session_repository = RepositoryFactory.create_class_session_repository(db)

    def tutor_conflicts(
        self,
        tutor_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        conflicts = [
            self._describe("booking", booking.id, booking.start_time, booking.end_time)
            for booking in self.booking_repository.find_tutor_overlaps(
                tutor_id, start_time, end_time, exclude_booking_id
            )
        ]
        conflicts.extend(
            self._describe("session", session.id, session.start_datetime, session.end_datetime)
            for session in self.session_repository.find_tutor_overlaps(tutor_id, start_time, end_time)
        )
        return conflicts

    def student_conflicts(
        self,
        student_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        conflicts = [
            self._describe("booking", booking.id, booking.start_time, booking.end_time)
            for booking in self.booking_repository.find_student_overlaps(
                student_id, start_time, end_time, exclude_booking_id
            )
        ]
        conflicts.extend(
            self._describe("session", session.id, session.start_datetime, session.end_datetime)
            for session in self.session_repository.find_student_overlaps(
                student_id, start_time, end_time
            )
        )
        return conflicts

    def has_student_conflict(self, student_id: str, start_time: datetime, end_time: datetime) -> bool:
        return bool(self.student_conflicts(student_id, start_time, end_time))

    @BaseService.measure_operation("ensure_no_conflicts")
    def ensure_no_conflicts(
        self,
        *,
        tutor_id: Optional[str],
        student_id: Optional[str],
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """
        Raise when either calendar is busy.

        Raises:
            BookingConflictException: with the clashing entries in ``details``
        """
        if tutor_id:
            clashes = self.tutor_conflicts(tutor_id, start_time, end_time, exclude_booking_id)
            if clashes:
                raise BookingConflictException(
                    TUTOR_CONFLICT_MESSAGE, details={"party": "tutor", "conflicts": clashes}
                )
        if student_id:
            clashes = self.student_conflicts(student_id, start_time, end_time, exclude_booking_id)
            if clashes:
                raise BookingConflictException(
                    STUDENT_CONFLICT_MESSAGE, details={"party": "student", "conflicts": clashes}
                )

    @staticmethod
    def _describe(kind: str, entry_id: str, start: datetime, end: datetime) -> Dict[str, Any]:
        return {
            "type": kind,
            "id": entry_id,
            "start_time": start.isoformat(),
            "end_time": end.isoformat(),
        }
