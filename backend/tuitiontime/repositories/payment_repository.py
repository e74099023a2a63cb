# backend/tuitiontime/repositories/payment_repository.py
"""Gateway payment and payout records."""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, aliased

from ..core.enums import GatewayPaymentStatus, GatewayPaymentType
from ..models.payment import Payment
from .base_repository import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    def __init__(self, db: Session):
        super().__init__(db, Payment)

    def get_by_order_id(self, order_id: str) -> Optional[Payment]:
        return self.find_one_by(gateway_order_id=order_id)

    def get_by_gateway_payment_id(self, payment_id: str) -> Optional[Payment]:
        return self.find_one_by(gateway_payment_id=payment_id)

    def find_for_gateway_event(
        self, payment_id: Optional[str], order_id: Optional[str]
    ) -> Optional[Payment]:
        """Locate by gateway payment id first, then fall back to the order id."""
        if payment_id:
            payment = self.get_by_gateway_payment_id(payment_id)
            if payment is not None:
                return payment
        if order_id:
            return self.get_by_order_id(order_id)
        return None

    def paid_class_payments_without_payout(
        self, period_start: datetime, period_end: datetime
    ) -> List[Payment]:
        payout = aliased(Payment)
        query = (
            self.db.query(Payment)
            .outerjoin(
                payout,
                (payout.source_payment_id == Payment.id)
                & (payout.payment_type == GatewayPaymentType.PAYOUT.value),
            )
            .filter(
                Payment.payment_type == GatewayPaymentType.SUBSCRIPTION.value,
                Payment.status == GatewayPaymentStatus.PAID.value,
                Payment.paid_at >= period_start,
                Payment.paid_at < period_end,
                payout.id.is_(None),
            )
            .order_by(Payment.paid_at.asc())
        )
        return self._execute(query)

    def list_filtered(
        self,
        *,
        payment_type: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[Payment], int]:
        query = self.db.query(Payment)
        if payment_type:
            query = query.filter(Payment.payment_type == payment_type)
        if status:
            query = query.filter(Payment.status == status)
        query = query.order_by(Payment.created_at.desc(), Payment.id.desc())
        return self._paginate(query, page, per_page)
