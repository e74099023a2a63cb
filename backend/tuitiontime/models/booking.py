# backend/tuitiontime/models/booking.py
"""
Booking model.

A booking ties a student to one tutor slot. Demo bookings are free and
confirmed on creation; regular bookings are paid either individually
(``escrow_amount`` holds the captured payment until the class completes)
or through a subscription, in which case ``subscription_id`` is set and
the money has already been settled.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import BookingStatus, PaymentStatus
from ..database import Base
from .types import TimestampMixin, UTCDateTime

ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    tutor_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    slot_id = Column(String(26), ForeignKey("availability_slots.id"), nullable=True)
    subscription_id = Column(String(26), ForeignKey("subscriptions.id"), nullable=True, index=True)

    subject = Column(String(120), nullable=False)
    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(UTCDateTime(), nullable=False)
    end_time = Column(UTCDateTime(), nullable=False)
    booking_type = Column(String(10), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_order_id = Column(String(64), nullable=True, index=True)
    payment_id = Column(String(64), nullable=True)
    escrow_amount = Column(Numeric(12, 2), nullable=False, default=0)

    meeting_link = Column(String(500), nullable=True)
    meeting_duration_minutes = Column(Integer, nullable=True)
    note = Column(Text, nullable=True)

    rating = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)

    confirmed_at = Column(UTCDateTime(), nullable=True)
    completed_at = Column(UTCDateTime(), nullable=True)
    cancelled_at = Column(UTCDateTime(), nullable=True)
    cancelled_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)

    student = relationship("User", foreign_keys=[student_id])
    tutor = relationship("User", foreign_keys=[tutor_id])
    slot = relationship("AvailabilitySlot")
    subscription = relationship("Subscription", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_bookings_range"),
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_bookings_rating"),
        CheckConstraint("amount >= 0", name="ck_bookings_amount"),
        Index("idx_bookings_student_window", "student_id", "status", "start_time"),
        Index("idx_bookings_tutor_window", "tutor_id", "status", "start_time"),
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_BOOKING_STATUSES

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.student_id, self.tutor_id)

    def __repr__(self) -> str:
        return f"<Booking {self.id} {self.booking_type} {self.status}>"
