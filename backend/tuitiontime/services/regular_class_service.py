# backend/tuitiontime/services/regular_class_service.py
"""
Regular Class Service for the TuitionTime platform

A student who liked a demo upgrades it into a regular class. The class is
created unpaid together with a gateway order; it becomes paid either when
the client posts the checkout signature or when the gateway webhook
reports the capture, whichever arrives first. The other is a no-op.

Captured class payments are held in platform escrow and released to the
tutor by the monthly payout run.
"""

from datetime import datetime, time, timezone
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import (
    BookingStatus,
    BookingType,
    ClassPaymentStatus,
    GatewayPaymentStatus,
    GatewayPaymentType,
    LedgerEntryKind,
    PlanType,
    RegularClassStatus,
)
from ..core.exceptions import (
    BusinessRuleException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    PaymentVerificationException,
)
from ..core.money import to_money, to_paise
from ..core.timezone_utils import add_months, utcnow
from ..integrations.razorpay_client import RazorpayClient
from ..models.payment import Payment
from ..models.regular_class import RegularClass
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.regular_class import StartRegularClassRequest
from .admin_notification_service import AdminNotificationService
from .base import BaseService
from .payment_gateway import build_receipt, create_gateway_order, verify_checkout_signature
from .wallet_service import WalletService

logger = logging.getLogger(__name__)

UPGRADEABLE_DEMO_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)


class RegularClassService(BaseService):
    def __init__(
        self,
        db: Session,
        wallet_service: Optional[WalletService] = None,
        admin_notification_service: Optional[AdminNotificationService] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_regular_class_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.tutor_profile_repository = RepositoryFactory.create_tutor_profile_repository(db)
        self.wallet_service = wallet_service or WalletService(db)
        self.admin_notifications = admin_notification_service or AdminNotificationService(db)

    # ------------------------------------------------------------------
    # Upgrade from demo
    # ------------------------------------------------------------------

    @BaseService.measure_operation("start_regular_from_demo")
    def start_regular_from_demo(
        self, student: User, request: StartRegularClassRequest, gateway: RazorpayClient
    ) -> Dict[str, Any]:
        """
        Create the unpaid class and its gateway order.

        Calling again for the same demo while the class is unpaid returns
        the order created the first time.
        """
        booking = self.booking_repository.get_by_id(request.booking_id)
        if booking is None or booking.student_id != student.id:
            raise NotFoundException("Demo booking not found")
        if booking.booking_type != BookingType.DEMO.value:
            raise BusinessRuleException("Only demo bookings can be upgraded to a regular class")
        if booking.status not in UPGRADEABLE_DEMO_STATUSES:
            raise BusinessRuleException(
                "The demo must be confirmed or completed before upgrading",
                details={"status": booking.status},
            )

        existing = self.repository.get_for_demo(booking.id)
        if existing is not None:
            if existing.is_paid:
                raise ConflictException(
                    "A regular class already exists for this demo", code="CLASS_EXISTS"
                )
            payment = self.payment_repository.get_by_order_id(existing.payment_ref or "")
            if payment is not None:
                return self._order_details(existing, payment, gateway.key_id)

        amount = self._plan_amount(booking.tutor_id, request)
        receipt = build_receipt("RC", student.id)
        order = create_gateway_order(
            gateway,
            amount,
            receipt,
            notes={"demo_booking_id": booking.id, "student_id": student.id},
        )

        start_date = (
            datetime.combine(request.start_date, time.min, tzinfo=timezone.utc)
            if request.start_date
            else utcnow()
        )
        with self.transaction():
            if existing is not None:
                regular_class = existing
                regular_class.plan_type = request.plan_type
                regular_class.sessions_per_week = request.sessions_per_week
                regular_class.time_slots = [slot.model_dump() for slot in request.time_slots]
                regular_class.start_date = start_date
                regular_class.amount = amount
                regular_class.payment_ref = order["id"]
            else:
                regular_class = self.repository.create(
                    student_id=student.id,
                    tutor_id=booking.tutor_id,
                    demo_booking_id=booking.id,
                    subject=booking.subject,
                    plan_type=request.plan_type,
                    sessions_per_week=request.sessions_per_week,
                    time_slots=[slot.model_dump() for slot in request.time_slots],
                    start_date=start_date,
                    amount=amount,
                    currency=settings.currency,
                    payment_status=ClassPaymentStatus.PENDING.value,
                    payment_ref=order["id"],
                    status=RegularClassStatus.ACTIVE.value,
                )
            payment = self.payment_repository.create(
                payment_type=GatewayPaymentType.SUBSCRIPTION.value,
                user_id=student.id,
                tutor_id=booking.tutor_id,
                regular_class_id=regular_class.id,
                gateway_order_id=order["id"],
                amount=amount,
                currency=settings.currency,
                status=GatewayPaymentStatus.CREATED.value,
            )

        self.log_operation(
            "regular_class_started", regular_class_id=regular_class.id, order_id=order["id"]
        )
        return self._order_details(regular_class, payment, gateway.key_id)

    def _plan_amount(self, tutor_id: str, request: StartRegularClassRequest) -> Decimal:
        """
        Price of one billing period.

        Monthly plans use the tutor's monthly rate, hourly plans one hour
        and weekly plans one hour per weekly session. Custom plans carry
        their own amount.
        """
        if request.plan_type == PlanType.CUSTOM.value:
            return to_money(request.amount)
        profile = self.tutor_profile_repository.get_by_user_id(tutor_id)
        if profile is None:
            raise NotFoundException("Tutor profile not found")
        if request.plan_type == PlanType.MONTHLY.value:
            rate = profile.monthly_rate
        elif request.plan_type == PlanType.WEEKLY.value:
            rate = (
                Decimal(profile.hourly_rate) * request.sessions_per_week
                if profile.hourly_rate
                else None
            )
        else:
            rate = profile.hourly_rate
        if not rate:
            raise BusinessRuleException(
                f"Tutor has no rate for the {request.plan_type} plan", code="TUTOR_RATE_MISSING"
            )
        return to_money(rate)

    @staticmethod
    def _order_details(regular_class: RegularClass, payment: Payment, key_id: str) -> Dict[str, Any]:
        return {
            "order_id": payment.gateway_order_id,
            "amount": to_money(payment.amount),
            "amount_paise": to_paise(payment.amount),
            "currency": payment.currency,
            "key_id": key_id,
            "receipt": None,
            "regular_class": regular_class,
            "payment_record_id": payment.id,
        }

    # ------------------------------------------------------------------
    # Payment capture
    # ------------------------------------------------------------------

    @BaseService.measure_operation("verify_class_payment")
    def verify_class_payment(
        self,
        student: User,
        regular_class_id: str,
        order_id: str,
        payment_id: str,
        signature: str,
        gateway: RazorpayClient,
    ) -> RegularClass:
        regular_class = self.get_class(student, regular_class_id)
        payment = self.payment_repository.get_by_order_id(order_id)
        if payment is None or payment.regular_class_id != regular_class.id:
            raise PaymentVerificationException("Order does not match this class")
        verify_checkout_signature(gateway, order_id, payment_id, signature)
        self.capture_payment(payment, payment_id)
        return regular_class

    def capture_payment(self, payment: Payment, gateway_payment_id: str) -> bool:
        """
        Mark a class payment captured. Returns False when already captured.

        Raises:
            PaymentVerificationException: already captured by a different payment
        """
        if payment.status in (GatewayPaymentStatus.PAID.value, GatewayPaymentStatus.SETTLED.value):
            if payment.gateway_payment_id and payment.gateway_payment_id != gateway_payment_id:
                raise PaymentVerificationException("Order was already paid by another payment")
            return False

        regular_class = self.repository.get_by_id(payment.regular_class_id)
        if regular_class is None:
            raise NotFoundException("Regular class not found")
        student = self.user_repository.get_by_id(payment.user_id)
        if student is None:
            raise NotFoundException("Student not found")

        now = utcnow()
        period_end = add_months(now, 1)
        amount = to_money(payment.amount)
        with self.transaction():
            payment.status = GatewayPaymentStatus.PAID.value
            payment.gateway_payment_id = gateway_payment_id
            payment.paid_at = now
            payment.period_start = now
            payment.period_end = period_end

            regular_class.payment_status = ClassPaymentStatus.PAID.value
            regular_class.current_period_start = now
            regular_class.current_period_end = period_end

            self.wallet_service.receive_from_gateway(
                student,
                amount,
                f"class-payment:{payment.id}:receipt",
                reference_type="regular_class",
                reference_id=regular_class.id,
                description=f"Payment for {regular_class.subject} classes",
            )
            self.wallet_service.distribute(
                LedgerEntryKind.CLASS_ESCROW,
                f"class-payment:{payment.id}:escrow",
                self.wallet_service.ensure_wallet(student),
                [(self.wallet_service.escrow_account(), amount)],
                reference_type="regular_class",
                reference_id=regular_class.id,
                description=f"Held for {regular_class.subject} payout",
            )
            self.admin_notifications.notify(
                "Subscription payment received",
                f"Payment {payment.id} captured",
                {"payment_id": payment.id, "regular_class_id": regular_class.id},
            )

        self.log_operation(
            "class_payment_captured", payment_id=payment.id, regular_class_id=regular_class.id
        )
        return True

    def fail_payment(self, payment: Payment) -> bool:
        """Record a failed capture. Returns False when nothing changed."""
        if payment.status != GatewayPaymentStatus.CREATED.value:
            return False
        regular_class = self.repository.get_by_id(payment.regular_class_id)
        with self.transaction():
            payment.status = GatewayPaymentStatus.FAILED.value
            if regular_class is not None and not regular_class.is_paid:
                regular_class.payment_status = ClassPaymentStatus.FAILED.value
        self.logger.info(f"Class payment {payment.id} failed")
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_class(self, user: User, regular_class_id: str) -> RegularClass:
        regular_class = self.repository.get_by_id(regular_class_id)
        if regular_class is None:
            raise NotFoundException("Regular class not found")
        if not user.is_admin and user.id not in (regular_class.student_id, regular_class.tutor_id):
            raise ForbiddenException("You do not have access to this class")
        return regular_class

    def list_my_classes(self, user: User) -> List[RegularClass]:
        if user.is_tutor:
            return self.repository.list_for_tutor(user.id)
        return self.repository.list_for_student(user.id)
