# backend/tuitiontime/repositories/regular_class_repository.py
"""Regular class and class session data access."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import ClassPaymentStatus, RegularClassStatus, SessionStatus
from ..models.regular_class import ClassSession, RegularClass
from .base_repository import BaseRepository


class RegularClassRepository(BaseRepository[RegularClass]):
    def __init__(self, db: Session):
        super().__init__(db, RegularClass)

    def list_for_student(self, student_id: str) -> List[RegularClass]:
        query = (
            self.db.query(RegularClass)
            .filter(RegularClass.student_id == student_id)
            .order_by(RegularClass.created_at.desc())
        )
        return self._execute(query)

    def list_for_tutor(self, tutor_id: str) -> List[RegularClass]:
        query = (
            self.db.query(RegularClass)
            .filter(RegularClass.tutor_id == tutor_id)
            .order_by(RegularClass.created_at.desc())
        )
        return self._execute(query)

    def get_for_demo(self, demo_booking_id: str) -> Optional[RegularClass]:
        return self.find_one_by(demo_booking_id=demo_booking_id)


class ClassSessionRepository(BaseRepository[ClassSession]):
    def __init__(self, db: Session):
        super().__init__(db, ClassSession)

    def _overlapping(self, start: datetime, end: datetime):
        return self.db.query(ClassSession).filter(
            ClassSession.status == SessionStatus.SCHEDULED.value,
            ClassSession.start_datetime < end,
            ClassSession.end_datetime > start,
        )

    def find_tutor_overlaps(self, tutor_id: str, start: datetime, end: datetime) -> List[ClassSession]:
        return self._execute(self._overlapping(start, end).filter(ClassSession.tutor_id == tutor_id))

    def find_student_overlaps(
        self, student_id: str, start: datetime, end: datetime
    ) -> List[ClassSession]:
        return self._execute(
            self._overlapping(start, end).filter(ClassSession.student_id == student_id)
        )

    def list_for_student(self, student_id: str) -> List[ClassSession]:
        """Sessions belonging to the student's paid, active classes."""
        query = (
            self.db.query(ClassSession)
            .join(RegularClass, RegularClass.id == ClassSession.regular_class_id)
            .filter(
                RegularClass.student_id == student_id,
                RegularClass.payment_status == ClassPaymentStatus.PAID.value,
                RegularClass.status == RegularClassStatus.ACTIVE.value,
            )
            .order_by(ClassSession.start_datetime.asc())
        )
        return self._execute(query)

    def list_for_tutor(self, tutor_id: str, regular_class_id: Optional[str] = None) -> List[ClassSession]:
        query = self.db.query(ClassSession).filter(ClassSession.tutor_id == tutor_id)
        if regular_class_id:
            query = query.filter(ClassSession.regular_class_id == regular_class_id)
        return self._execute(query.order_by(ClassSession.start_datetime.asc()))
