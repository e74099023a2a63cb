# backend/tuitiontime/models/availability.py
"""
Availability slot model.

A slot is a concrete, bookable time range published by a tutor. Slots are
claimed by flipping ``is_booked`` with a conditional update so two students
can never hold the same slot.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import SlotType
from ..database import Base
from .types import TimestampMixin, UTCDateTime


class AvailabilitySlot(TimestampMixin, Base):
    __tablename__ = "availability_slots"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    tutor_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    start_time = Column(UTCDateTime(), nullable=False)
    end_time = Column(UTCDateTime(), nullable=False)
    is_booked = Column(Boolean, nullable=False, default=False)
    slot_type = Column(String(10), nullable=False, default=SlotType.DEMO.value)

    tutor = relationship("User")

    __table_args__ = (
        UniqueConstraint("tutor_id", "start_time", name="uq_availability_tutor_start"),
        CheckConstraint("end_time > start_time", name="ck_availability_range"),
        Index("idx_availability_tutor_free", "tutor_id", "is_booked", "slot_type", "start_time"),
    )

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def __repr__(self) -> str:
        return f"<AvailabilitySlot {self.tutor_id} {self.start_time}-{self.end_time}>"
