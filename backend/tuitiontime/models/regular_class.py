# backend/tuitiontime/models/regular_class.py
"""
Regular classes and their scheduled sessions.

A regular class is the paid, ongoing arrangement a student starts after a
demo. Tutors schedule individual ``ClassSession`` rows against it once the
class has been paid for.
"""

from sqlalchemy import JSON, CheckConstraint, Column, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import Attendance, ClassPaymentStatus, RegularClassStatus, SessionStatus
from ..database import Base
from .types import TimestampMixin, UTCDateTime


class RegularClass(TimestampMixin, Base):
    __tablename__ = "regular_classes"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    tutor_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    demo_booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=True)

    subject = Column(String(120), nullable=False)
    plan_type = Column(String(10), nullable=False)
    sessions_per_week = Column(Integer, nullable=False, default=1)
    # [{"day_of_week": "Mon", "time": "17:30"}, ...]
    time_slots = Column(JSON, nullable=False, default=list)
    start_date = Column(UTCDateTime(), nullable=False)

    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    payment_status = Column(String(10), nullable=False, default=ClassPaymentStatus.PENDING.value)
    payment_ref = Column(String(64), nullable=True)
    status = Column(String(10), nullable=False, default=RegularClassStatus.ACTIVE.value)
    current_period_start = Column(UTCDateTime(), nullable=True)
    current_period_end = Column(UTCDateTime(), nullable=True)

    student = relationship("User", foreign_keys=[student_id])
    tutor = relationship("User", foreign_keys=[tutor_id])
    sessions = relationship(
        "ClassSession",
        back_populates="regular_class",
        order_by="ClassSession.start_datetime",
        cascade="all, delete-orphan",
    )

    __table_args__ = (CheckConstraint("amount > 0", name="ck_regular_classes_amount"),)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == ClassPaymentStatus.PAID.value


class ClassSession(TimestampMixin, Base):
    __tablename__ = "class_sessions"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    regular_class_id = Column(
        String(26), ForeignKey("regular_classes.id", ondelete="CASCADE"), nullable=False
    )
    tutor_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    student_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    start_datetime = Column(UTCDateTime(), nullable=False)
    end_datetime = Column(UTCDateTime(), nullable=False)
    meeting_link = Column(String(500), nullable=True)
    status = Column(String(10), nullable=False, default=SessionStatus.SCHEDULED.value)
    attendance = Column(String(12), nullable=False, default=Attendance.NOT_MARKED.value)
    tutor_notes = Column(Text, nullable=True)

    regular_class = relationship("RegularClass", back_populates="sessions")

    __table_args__ = (
        CheckConstraint("end_datetime > start_datetime", name="ck_class_sessions_range"),
        Index("idx_class_sessions_tutor_window", "tutor_id", "status", "start_datetime"),
        Index("idx_class_sessions_student_window", "student_id", "status", "start_datetime"),
    )
