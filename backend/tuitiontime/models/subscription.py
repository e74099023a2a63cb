# backend/tuitiontime/models/subscription.py
"""
Monthly subscription models.

A ``SubscriptionIntent`` is recorded when checkout creates a gateway order.
Verifying the payment consumes the intent exactly once and produces the
``Subscription`` together with its generated bookings.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import IntentStatus, PaymentStatus, SubscriptionStatus
from ..database import Base
from .types import TimestampMixin, UTCDateTime


class SubscriptionIntent(TimestampMixin, Base):
    __tablename__ = "subscription_intents"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    tutor_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    order_id = Column(String(64), nullable=False, unique=True, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    sessions_per_week = Column(Integer, nullable=False, default=2)
    subject = Column(String(120), nullable=True)
    status = Column(String(20), nullable=False, default=IntentStatus.PENDING.value)
    subscription_id = Column(String(26), ForeignKey("subscriptions.id"), nullable=True)


class Subscription(TimestampMixin, Base):
    __tablename__ = "subscriptions"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    tutor_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    plan = Column(String(20), nullable=False, default="monthly")
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    sessions_per_week = Column(Integer, nullable=False, default=2)
    subject = Column(String(120), nullable=True)
    status = Column(String(20), nullable=False, default=SubscriptionStatus.ACTIVE.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.COMPLETED.value)
    payment_order_id = Column(String(64), nullable=False, unique=True)
    payment_id = Column(String(64), nullable=False)
    start_date = Column(UTCDateTime(), nullable=False)
    end_date = Column(UTCDateTime(), nullable=False)
    generated_bookings_count = Column(Integer, nullable=False, default=0)

    tutor = relationship("User", foreign_keys=[tutor_id])
    bookings = relationship("Booking", back_populates="subscription", order_by="Booking.start_time")

    __table_args__ = (
        CheckConstraint("sessions_per_week >= 1 AND sessions_per_week <= 14", name="ck_subscriptions_spw"),
    )
