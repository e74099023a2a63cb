# backend/tuitiontime/repositories/availability_repository.py
"""
Availability slot data access.

``claim`` and ``release`` are single conditional UPDATE statements; the
caller learns whether it won the slot from the affected row count, which
stays correct when two requests race for the same slot.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import AvailabilitySlot
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[AvailabilitySlot]):
    def __init__(self, db: Session):
        super().__init__(db, AvailabilitySlot)

    def get_for_tutor(self, tutor_id: str) -> List[AvailabilitySlot]:
        query = (
            self.db.query(AvailabilitySlot)
            .filter(AvailabilitySlot.tutor_id == tutor_id)
            .order_by(AvailabilitySlot.start_time.asc())
        )
        return self._execute(query)

    def get_by_tutor_and_start(self, tutor_id: str, start_time: datetime) -> Optional[AvailabilitySlot]:
        return (
            self.db.query(AvailabilitySlot)
            .filter(
                AvailabilitySlot.tutor_id == tutor_id,
                AvailabilitySlot.start_time == start_time,
            )
            .first()
        )

    def find_overlapping(
        self,
        tutor_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_start: Optional[datetime] = None,
    ) -> List[AvailabilitySlot]:
        """Slots of the tutor intersecting ``[start_time, end_time)``."""
        query = self.db.query(AvailabilitySlot).filter(
            AvailabilitySlot.tutor_id == tutor_id,
            AvailabilitySlot.start_time < end_time,
            AvailabilitySlot.end_time > start_time,
        )
        if exclude_start is not None:
            query = query.filter(AvailabilitySlot.start_time != exclude_start)
        return self._execute(query)

    def free_slots(
        self,
        tutor_id: str,
        *,
        slot_type: Optional[str],
        start_from: datetime,
        start_before: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[AvailabilitySlot]:
        query = self.db.query(AvailabilitySlot).filter(
            AvailabilitySlot.tutor_id == tutor_id,
            AvailabilitySlot.is_booked.is_(False),
            AvailabilitySlot.start_time >= start_from,
        )
        if slot_type:
            query = query.filter(AvailabilitySlot.slot_type == slot_type)
        if start_before is not None:
            query = query.filter(AvailabilitySlot.start_time < start_before)
        query = query.order_by(AvailabilitySlot.start_time.asc())
        if limit is not None:
            query = query.limit(limit)
        return self._execute(query)

    def find_exact(
        self,
        tutor_id: str,
        start_time: datetime,
        end_time: datetime,
        slot_type: str,
    ) -> Optional[AvailabilitySlot]:
        return (
            self.db.query(AvailabilitySlot)
            .filter(
                AvailabilitySlot.tutor_id == tutor_id,
                AvailabilitySlot.start_time == start_time,
                AvailabilitySlot.end_time == end_time,
                AvailabilitySlot.slot_type == slot_type,
            )
            .first()
        )

    def claim(self, slot_id: str) -> bool:
        """Atomically mark a free slot as booked. False when already taken."""
        try:
            result = self.db.execute(
                update(AvailabilitySlot)
                .where(AvailabilitySlot.id == slot_id, AvailabilitySlot.is_booked.is_(False))
                .values(is_booked=True)
                .execution_options(synchronize_session="fetch")
            )
            return result.rowcount == 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error claiming slot {slot_id}: {str(e)}")
            raise RepositoryException(f"Failed to claim slot: {str(e)}")

    def release(self, slot_id: str) -> bool:
        try:
            result = self.db.execute(
                update(AvailabilitySlot)
                .where(AvailabilitySlot.id == slot_id, AvailabilitySlot.is_booked.is_(True))
                .values(is_booked=False)
                .execution_options(synchronize_session="fetch")
            )
            return result.rowcount == 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error releasing slot {slot_id}: {str(e)}")
            raise RepositoryException(f"Failed to release slot: {str(e)}")
