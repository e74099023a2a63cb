# backend/tuitiontime/repositories/tutor_switch_repository.py
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import SwitchRequestStatus
from ..models.tutor_switch import TutorSwitchRequest
from .base_repository import BaseRepository

OPEN_SWITCH_STATUSES = (SwitchRequestStatus.OPEN.value, SwitchRequestStatus.IN_PROGRESS.value)


class TutorSwitchRepository(BaseRepository[TutorSwitchRequest]):
    def __init__(self, db: Session):
        super().__init__(db, TutorSwitchRequest)

    def list_for_student(self, student_id: str) -> List[TutorSwitchRequest]:
        query = (
            self.db.query(TutorSwitchRequest)
            .filter(TutorSwitchRequest.student_id == student_id)
            .order_by(TutorSwitchRequest.created_at.desc())
        )
        return self._execute(query)

    def list_all(self, status: Optional[str] = None) -> List[TutorSwitchRequest]:
        query = self.db.query(TutorSwitchRequest)
        if status:
            query = query.filter(TutorSwitchRequest.status == status)
        return self._execute(query.order_by(TutorSwitchRequest.created_at.desc()))

    def has_open_request(self, regular_class_id: str) -> bool:
        return (
            self.db.query(TutorSwitchRequest.id)
            .filter(
                TutorSwitchRequest.regular_class_id == regular_class_id,
                TutorSwitchRequest.status.in_(OPEN_SWITCH_STATUSES),
            )
            .first()
            is not None
        )
