# backend/tuitiontime/models/payment.py
"""
Gateway payment records.

One row per gateway order (class subscription, single booking or wallet
top-up) plus one row per tutor payout. Payouts reference the class payment
they settle through ``source_payment_id``.
"""

from sqlalchemy import JSON, Column, ForeignKey, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import GatewayPaymentStatus
from ..database import Base
from .types import TimestampMixin, UTCDateTime


class Payment(TimestampMixin, Base):
    __tablename__ = "payments"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    payment_type = Column(String(20), nullable=False, index=True)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)
    tutor_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)
    regular_class_id = Column(String(26), ForeignKey("regular_classes.id"), nullable=True)
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=True)
    source_payment_id = Column(String(26), ForeignKey("payments.id"), nullable=True)

    gateway = Column(String(20), nullable=False, default="razorpay")
    gateway_order_id = Column(String(64), nullable=True, unique=True)
    gateway_payment_id = Column(String(64), nullable=True, unique=True)

    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    commission_percent = Column(Numeric(5, 2), nullable=True)
    commission_amount = Column(Numeric(12, 2), nullable=True)
    tutor_net_amount = Column(Numeric(12, 2), nullable=True)
    period_start = Column(UTCDateTime(), nullable=True)
    period_end = Column(UTCDateTime(), nullable=True)

    status = Column(String(10), nullable=False, default=GatewayPaymentStatus.CREATED.value)
    paid_at = Column(UTCDateTime(), nullable=True)
    settled_at = Column(UTCDateTime(), nullable=True)
    notes = Column(JSON, nullable=True)

    regular_class = relationship("RegularClass")
    source_payment = relationship("Payment", remote_side=[id])

    __table_args__ = (
        UniqueConstraint("source_payment_id", "payment_type", name="uq_payments_single_payout"),
        Index("idx_payments_type_status", "payment_type", "status"),
    )
