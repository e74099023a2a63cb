# backend/tuitiontime/services/availability_service.py
"""
Availability Service for the TuitionTime platform

Tutors publish bookable time slots. A slot is identified by its tutor and
start time: re-sending a slot with the same start updates it in place,
while a slot whose range intersects a different existing slot is
rejected. Booked slots are never modified through this service.

Slots are claimed by bookings with a conditional UPDATE so that two
students racing for the same slot cannot both win it.
"""

from datetime import datetime
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.enums import SlotType, UserRole
from ..core.exceptions import (
    AvailabilityOverlapException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    SlotUnavailableException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc, overlaps, utcnow
from ..models.availability import AvailabilitySlot
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import SlotInput
from .base import BaseService

logger = logging.getLogger(__name__)


def _format_range(start: datetime, end: datetime) -> str:
    return f"{start.isoformat()} - {end.isoformat()}"


class AvailabilityService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_availability_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("set_slots")
    def set_slots(self, tutor: User, slots: Sequence[SlotInput]) -> Dict[str, List[AvailabilitySlot]]:
        """
        Create or update a batch of slots for a tutor.

        Returns:
            Dict with ``created``, ``updated`` and ``skipped`` slot lists.
            Skipped slots are existing booked slots left untouched.

        Raises:
            ValidationException: empty batch, inverted range or slot in the past
            AvailabilityOverlapException: overlap within the batch or with
                another existing slot
        """
        if not slots:
            raise ValidationException("At least one slot is required")

        now = utcnow()
        ranges = []
        for slot in slots:
            start, end = ensure_utc(slot.start_time), ensure_utc(slot.end_time)
            if end <= start:
                raise ValidationException("Slot end time must be after its start time")
            if start < now:
                raise ValidationException(
                    "Slots cannot start in the past", details={"start_time": start.isoformat()}
                )
            ranges.append((start, end, SlotType(slot.slot_type).value))

        ranges.sort(key=lambda item: item[0])
        for previous, current in zip(ranges, ranges[1:]):
            if overlaps(previous[0], previous[1], current[0], current[1]):
                raise AvailabilityOverlapException(
                    _format_range(current[0], current[1]), _format_range(previous[0], previous[1])
                )

        result: Dict[str, List[AvailabilitySlot]] = {"created": [], "updated": [], "skipped": []}
        with self.transaction():
            for start, end, slot_type in ranges:
                clashes = self.repository.find_overlapping(tutor.id, start, end, exclude_start=start)
                if clashes:
                    clash = clashes[0]
                    raise AvailabilityOverlapException(
                        _format_range(start, end), _format_range(clash.start_time, clash.end_time)
                    )

                existing = self.repository.get_by_tutor_and_start(tutor.id, start)
                if existing is None:
                    created = self.repository.create(
                        tutor_id=tutor.id,
                        start_time=start,
                        end_time=end,
                        slot_type=slot_type,
                        is_booked=False,
                    )
                    result["created"].append(created)
                elif existing.is_booked:
                    result["skipped"].append(existing)
                else:
                    existing.end_time = end
                    existing.slot_type = slot_type
                    result["updated"].append(existing)

        self.logger.info(
            f"Tutor {tutor.id} slots: {len(result['created'])} created, "
            f"{len(result['updated'])} updated, {len(result['skipped'])} skipped"
        )
        return result

    def get_my_slots(self, tutor: User) -> List[AvailabilitySlot]:
        return self.repository.get_for_tutor(tutor.id)

    def get_tutor_slots(
        self,
        tutor_id: str,
        slot_type: Optional[SlotType] = SlotType.DEMO,
        start_from: Optional[datetime] = None,
    ) -> List[AvailabilitySlot]:
        """Free slots of a tutor from ``start_from`` (default now), earliest first."""
        tutor = self.user_repository.get_by_id(tutor_id)
        if tutor is None or tutor.role != UserRole.TUTOR.value:
            raise NotFoundException("Tutor not found")
        return self.repository.free_slots(
            tutor_id,
            slot_type=SlotType(slot_type).value if slot_type else None,
            start_from=ensure_utc(start_from) if start_from else utcnow(),
        )

    @BaseService.measure_operation("delete_slot")
    def delete_slot(self, tutor: User, slot_id: str) -> None:
        slot = self.repository.get_by_id(slot_id)
        if slot is None:
            raise NotFoundException("Slot not found")
        if slot.tutor_id != tutor.id:
            raise ForbiddenException("You can only delete your own slots")
        if slot.is_booked:
            raise ConflictException("Booked slots cannot be deleted", code="SLOT_BOOKED")
        with self.transaction():
            self.repository.delete(slot.id)
        self.logger.info(f"Tutor {tutor.id} deleted slot {slot_id}")

    # ------------------------------------------------------------------
    # Allocation, used by bookings and subscriptions
    # ------------------------------------------------------------------

    def claim_slot(self, slot: AvailabilitySlot) -> AvailabilitySlot:
        """
        Mark the slot booked or raise if someone else got there first.

        Must run inside the caller's transaction.
        """
        won = self.repository.claim(slot.id)
        prometheus_metrics.record_slot_claim(won)
        if not won:
            raise SlotUnavailableException(slot.id)
        return slot

    def try_claim(self, slot: AvailabilitySlot) -> bool:
        won = self.repository.claim(slot.id)
        prometheus_metrics.record_slot_claim(won)
        return won

    def release_slot(self, slot_id: Optional[str]) -> bool:
        if not slot_id:
            return False
        released = self.repository.release(slot_id)
        if released:
            self.logger.info(f"Released slot {slot_id}")
        return released
