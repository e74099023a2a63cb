# backend/tuitiontime/repositories/enquiry_repository.py
from typing import List

from sqlalchemy.orm import Session

from ..models.enquiry import Enquiry
from .base_repository import BaseRepository


class EnquiryRepository(BaseRepository[Enquiry]):
    def __init__(self, db: Session):
        super().__init__(db, Enquiry)

    def list_for_student(self, student_id: str) -> List[Enquiry]:
        query = (
            self.db.query(Enquiry)
            .filter(Enquiry.student_id == student_id)
            .order_by(Enquiry.created_at.desc())
        )
        return self._execute(query)

    def list_for_tutor(self, tutor_id: str, status: str | None = None) -> List[Enquiry]:
        query = self.db.query(Enquiry).filter(Enquiry.tutor_id == tutor_id)
        if status:
            query = query.filter(Enquiry.status == status)
        return self._execute(query.order_by(Enquiry.created_at.desc()))
