# backend/tuitiontime/services/payment_service.py
"""
Payment Service for the TuitionTime platform

Handles:
- Razorpay webhooks for regular class payments
- Monthly tutor payout generation and settlement
- Admin payment listings

Webhook deliveries are at-least-once. Every handler is a no-op when the
payment already reached the reported state, so replays are harmless.
"""

from datetime import date, datetime, time, timedelta, timezone
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import GatewayPaymentStatus, GatewayPaymentType, LedgerEntryKind
from ..core.exceptions import (
    BusinessRuleException,
    ConflictException,
    NotFoundException,
    PaymentVerificationException,
    UnauthorizedException,
    ValidationException,
)
from ..core.money import percentage_of, to_money
from ..core.timezone_utils import utcnow
from ..integrations.razorpay_client import verify_webhook_signature
from ..models.payment import Payment
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .admin_notification_service import AdminNotificationService
from .base import BaseService
from .regular_class_service import RegularClassService
from .wallet_service import WalletService

logger = logging.getLogger(__name__)

EVENT_CAPTURED = "payment.captured"
EVENT_FAILED = "payment.failed"


def period_bounds(period_start: date, period_end: date) -> Tuple[datetime, datetime]:
    """Half-open UTC window covering both dates in full."""
    start = datetime.combine(period_start, time.min, tzinfo=timezone.utc)
    end = datetime.combine(period_end + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return start, end


class PaymentService(BaseService):
    def __init__(
        self,
        db: Session,
        wallet_service: Optional[WalletService] = None,
        admin_notification_service: Optional[AdminNotificationService] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_payment_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.wallet_service = wallet_service or WalletService(db)
        self.admin_notifications = admin_notification_service or AdminNotificationService(db)
        self.regular_class_service = RegularClassService(
            db,
            wallet_service=self.wallet_service,
            admin_notification_service=self.admin_notifications,
        )

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    @BaseService.measure_operation("handle_payment_webhook")
    def handle_webhook(self, body: bytes, signature: Optional[str]) -> str:
        """
        Process a Razorpay webhook delivery.

        Returns one of ``processed``, ``duplicate`` or ``ignored``.

        Raises:
            UnauthorizedException: signature missing or invalid
            ValidationException: body is not a Razorpay event
        """
        secret = settings.razorpay_webhook_secret.get_secret_value()
        if not verify_webhook_signature(body, signature, secret):
            prometheus_metrics.record_gateway_event("webhook", "bad_signature")
            raise UnauthorizedException("Invalid webhook signature", code="INVALID_SIGNATURE")

        try:
            payload = json.loads(body)
            event = payload["event"]
            entity = payload["payload"]["payment"]["entity"]
        except (ValueError, KeyError, TypeError):
            raise ValidationException("Malformed webhook payload")

        if event not in (EVENT_CAPTURED, EVENT_FAILED):
            prometheus_metrics.record_gateway_event(event, "ignored")
            return "ignored"

        payment = self.repository.find_for_gateway_event(entity.get("id"), entity.get("order_id"))
        if payment is None or payment.payment_type != GatewayPaymentType.SUBSCRIPTION.value:
            self.logger.info(f"Webhook {event} for unknown order {entity.get('order_id')}")
            prometheus_metrics.record_gateway_event(event, "ignored")
            return "ignored"

        if event == EVENT_CAPTURED:
            try:
                changed = self.regular_class_service.capture_payment(payment, entity["id"])
            except PaymentVerificationException as e:
                self.logger.warning(f"Webhook capture rejected for {payment.id}: {e.message}")
                prometheus_metrics.record_gateway_event(event, "rejected")
                return "ignored"
        else:
            changed = self.regular_class_service.fail_payment(payment)

        outcome = "processed" if changed else "duplicate"
        prometheus_metrics.record_gateway_event(event, outcome)
        return outcome

    # ------------------------------------------------------------------
    # Payouts
    # ------------------------------------------------------------------

    @BaseService.measure_operation("generate_payouts")
    def generate_payouts(self, period_start: date, period_end: date) -> List[Payment]:
        """Create one payout per paid class payment in the period that has none yet."""
        if period_end < period_start:
            raise ValidationException("period_end must not be before period_start")
        start, end = period_bounds(period_start, period_end)
        commission_percent = settings.payout_commission_percent

        payouts: List[Payment] = []
        with self.transaction():
            for source in self.repository.paid_class_payments_without_payout(start, end):
                amount = to_money(source.amount)
                commission = percentage_of(amount, commission_percent)
                payouts.append(
                    self.repository.create(
                        payment_type=GatewayPaymentType.PAYOUT.value,
                        tutor_id=source.tutor_id,
                        regular_class_id=source.regular_class_id,
                        source_payment_id=source.id,
                        amount=amount,
                        currency=source.currency,
                        commission_percent=commission_percent,
                        commission_amount=commission,
                        tutor_net_amount=amount - commission,
                        period_start=source.period_start,
                        period_end=source.period_end,
                        status=GatewayPaymentStatus.CREATED.value,
                    )
                )
            if payouts:
                self.admin_notifications.notify(
                    "Payouts generated",
                    f"{len(payouts)} payouts created for {period_start} to {period_end}",
                    {
                        "count": len(payouts),
                        "period_start": period_start.isoformat(),
                        "period_end": period_end.isoformat(),
                    },
                )

        self.log_operation("payouts_generated", count=len(payouts))
        return payouts

    @BaseService.measure_operation("settle_payout")
    def settle_payout(self, payout_id: str) -> Payment:
        payout = self.repository.get_by_id(payout_id)
        if payout is None or payout.payment_type != GatewayPaymentType.PAYOUT.value:
            raise NotFoundException("Payout not found")
        if payout.status == GatewayPaymentStatus.SETTLED.value:
            raise ConflictException("Payout is already settled", code="PAYOUT_SETTLED")
        if payout.status != GatewayPaymentStatus.CREATED.value:
            raise BusinessRuleException(
                "Only created payouts can be settled", details={"status": payout.status}
            )
        tutor = self.user_repository.get_by_id(payout.tutor_id)
        if tutor is None:
            raise NotFoundException("Tutor not found")

        with self.transaction():
            self.wallet_service.distribute(
                LedgerEntryKind.PAYOUT_SETTLEMENT,
                f"payout:{payout.id}:settle",
                self.wallet_service.escrow_account(),
                [
                    (self.wallet_service.ensure_wallet(tutor), to_money(payout.tutor_net_amount)),
                    (self.wallet_service.revenue_account(), to_money(payout.commission_amount)),
                ],
                reference_type="payout",
                reference_id=payout.id,
                description=f"Payout to {tutor.display_name}",
            )
            payout.status = GatewayPaymentStatus.SETTLED.value
            payout.settled_at = utcnow()
            self.admin_notifications.notify(
                "Payout settled",
                f"Paid {payout.tutor_net_amount} to {tutor.display_name}",
                {"payout_id": payout.id, "tutor_id": tutor.id},
            )

        self.log_operation("payout_settled", payout_id=payout.id)
        return payout

    def list_payments(
        self,
        *,
        payment_type: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[Payment], int]:
        return self.repository.list_filtered(
            payment_type=payment_type, status=status, page=page, per_page=per_page
        )

    def get_payment(self, payment_id: str) -> Payment:
        payment = self.repository.get_by_id(payment_id)
        if payment is None:
            raise NotFoundException("Payment not found")
        return payment

    def summary(self) -> Dict[str, Any]:
        """Ledger health for the admin dashboard."""
        return self.wallet_service.check_invariant()
