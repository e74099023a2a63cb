# backend/tuitiontime/repositories/booking_repository.py
"""
Booking Repository for the TuitionTime platform

Overlap queries use the half-open interval test
``existing.start < new.end AND existing.end > new.start`` restricted to
bookings that still occupy the calendar (pending or confirmed).
"""

from datetime import date, datetime
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from ..core.enums import BookingStatus, BookingType
from ..models.booking import ACTIVE_BOOKING_STATUSES, Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def get_with_participants(self, booking_id: str) -> Optional[Booking]:
        return (
            self.db.query(Booking)
            .options(joinedload(Booking.student), joinedload(Booking.tutor))
            .filter(Booking.id == booking_id)
            .first()
        )

    def find_student_overlaps(
        self,
        student_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        query = self.db.query(Booking).filter(
            Booking.student_id == student_id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return self._execute(query)

    def find_tutor_overlaps(
        self,
        tutor_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        query = self.db.query(Booking).filter(
            Booking.tutor_id == tutor_id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return self._execute(query)

    def has_demo_on_date(self, student_id: str, tutor_id: str, booking_date: date) -> bool:
        return (
            self.db.query(Booking.id)
            .filter(
                Booking.student_id == student_id,
                Booking.tutor_id == tutor_id,
                Booking.booking_date == booking_date,
                Booking.booking_type == BookingType.DEMO.value,
                Booking.status != BookingStatus.CANCELLED.value,
            )
            .first()
            is not None
        )

    def list_for_tutor(
        self,
        tutor_id: str,
        *,
        status: Optional[str] = None,
        booking_type: Optional[str] = None,
    ) -> List[Booking]:
        query = self.db.query(Booking).filter(Booking.tutor_id == tutor_id)
        if status:
            query = query.filter(Booking.status == status)
        if booking_type:
            query = query.filter(Booking.booking_type == booking_type)
        return self._execute(query.order_by(Booking.start_time.desc()))

    def list_page(
        self,
        *,
        page: int,
        per_page: int,
        student_id: Optional[str] = None,
        tutor_id: Optional[str] = None,
    ) -> Tuple[List[Booking], int]:
        """Newest first; narrowed to one participant when an id is given."""
        query = self.db.query(Booking)
        if student_id:
            query = query.filter(Booking.student_id == student_id)
        if tutor_id:
            query = query.filter(Booking.tutor_id == tutor_id)
        query = query.order_by(Booking.start_time.desc(), Booking.id.desc())
        return self._paginate(query, page, per_page)

    def past_tutor_ids(self, student_id: str) -> List[str]:
        rows = (
            self.db.query(Booking.tutor_id)
            .filter(Booking.student_id == student_id)
            .distinct()
            .all()
        )
        return [row[0] for row in rows]
