# backend/tuitiontime/services/subscription_service.py
"""
Subscription Service for the TuitionTime platform

Monthly plans are bought in two steps:

1. ``checkout`` creates a gateway order for the tutor's monthly rate and
   records a pending ``SubscriptionIntent``. Nothing the client sends later
   is trusted for price or tutor; the intent is the source of truth.
2. ``verify`` checks the gateway signature and, in one transaction,
   creates the subscription, claims up to ``sessions_per_week * weeks``
   free regular slots, books them, consumes the intent and posts the
   ledger entries. A consumed intent returns the subscription it produced,
   so a retried verification never books twice.
"""

from datetime import timedelta
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import (
    BookingStatus,
    BookingType,
    IntentStatus,
    LedgerEntryKind,
    PaymentStatus,
    SlotType,
    SubscriptionStatus,
    UserRole,
)
from ..core.exceptions import BusinessRuleException, NotFoundException
from ..core.money import divide_evenly, split_share, to_money, to_paise
from ..core.timezone_utils import add_months, overlaps, utcnow
from ..core.ulid_helper import generate_ulid
from ..integrations.razorpay_client import RazorpayClient
from ..models.availability import AvailabilitySlot
from ..models.subscription import Subscription, SubscriptionIntent
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .availability_service import AvailabilityService
from .base import BaseService
from .conflict_checker import ConflictChecker
from .meeting import meeting_link
from .notification_service import NotificationService
from .payment_gateway import build_receipt, create_gateway_order, verify_checkout_signature
from .wallet_service import WalletService

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Regular Class"


class SubscriptionService(BaseService):
    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        wallet_service: Optional[WalletService] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_subscription_repository(db)
        self.intent_repository = RepositoryFactory.create_subscription_intent_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.slot_repository = RepositoryFactory.create_availability_repository(db)
        self.availability_service = AvailabilityService(db)
        self.conflict_checker = ConflictChecker(db)
        self.notification_service = notification_service or NotificationService(db)
        self.wallet_service = wallet_service or WalletService(db)

    @BaseService.measure_operation("subscription_checkout")
    def checkout(
        self,
        student: User,
        tutor_id: str,
        gateway: RazorpayClient,
        sessions_per_week: Optional[int] = None,
        subject: Optional[str] = None,
    ) -> Dict[str, Any]:
        tutor = self.user_repository.get_with_profiles(tutor_id)
        if tutor is None or tutor.role != UserRole.TUTOR.value:
            raise NotFoundException("Tutor not found")
        profile = tutor.tutor_profile
        if profile is None or not profile.monthly_rate:
            raise BusinessRuleException(
                "Tutor has not set a monthly rate", code="TUTOR_RATE_MISSING"
            )

        amount = max(to_money(profile.monthly_rate), Decimal("1.00"))
        per_week = sessions_per_week or settings.default_sessions_per_week
        receipt = build_receipt("SUB", tutor.id)
        order = create_gateway_order(
            gateway,
            amount,
            receipt,
            notes={"student_id": student.id, "tutor_id": tutor.id, "plan": "monthly"},
        )

        with self.transaction():
            self.intent_repository.create(
                student_id=student.id,
                tutor_id=tutor.id,
                order_id=order["id"],
                amount=amount,
                currency=settings.currency,
                sessions_per_week=per_week,
                subject=(subject or "").strip() or None,
                status=IntentStatus.PENDING.value,
            )

        self.log_operation("subscription_checkout", student_id=student.id, order_id=order["id"])
        return {
            "order_id": order["id"],
            "amount": amount,
            "amount_paise": to_paise(amount),
            "currency": settings.currency,
            "key_id": gateway.key_id,
            "receipt": receipt,
            "tutor_id": tutor.id,
            "sessions_per_week": per_week,
        }

    @BaseService.measure_operation("subscription_verify")
    def verify(
        self,
        student: User,
        order_id: str,
        payment_id: str,
        signature: str,
        gateway: RazorpayClient,
    ) -> Subscription:
        verify_checkout_signature(gateway, order_id, payment_id, signature)

        intent = self.intent_repository.get_for_student(order_id, student.id)
        if intent is None:
            raise NotFoundException("Pending subscription intent not found")
        if intent.status == IntentStatus.CONSUMED.value and intent.subscription_id:
            existing = self.repository.get_by_id(intent.subscription_id)
            if existing is not None:
                self.logger.info(f"Subscription intent {order_id} already consumed, replaying")
                return existing
        if intent.status != IntentStatus.PENDING.value:
            raise BusinessRuleException("Subscription intent is no longer pending")

        tutor = self.user_repository.get_with_profiles(intent.tutor_id)
        if tutor is None:
            raise NotFoundException("Tutor not found")

        now = utcnow()
        with self.transaction():
            subscription = self.repository.create(
                student_id=student.id,
                tutor_id=tutor.id,
                plan="monthly",
                subject=intent.subject,
                amount=to_money(intent.amount),
                currency=intent.currency,
                sessions_per_week=intent.sessions_per_week,
                status=SubscriptionStatus.ACTIVE.value,
                payment_status=PaymentStatus.COMPLETED.value,
                payment_order_id=order_id,
                payment_id=payment_id,
                start_date=now,
                end_date=add_months(now, 1),
            )

            slots = self._claim_slots(student, intent)
            per_class = divide_evenly(subscription.amount, max(len(slots), 1))
            for slot in slots:
                booking_id = generate_ulid()
                self.booking_repository.create(
                    id=booking_id,
                    student_id=student.id,
                    tutor_id=tutor.id,
                    slot_id=slot.id,
                    subscription_id=subscription.id,
                    subject=intent.subject or DEFAULT_SUBJECT,
                    booking_date=slot.start_time.date(),
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    booking_type=BookingType.REGULAR.value,
                    amount=per_class,
                    status=BookingStatus.CONFIRMED.value,
                    payment_status=PaymentStatus.COMPLETED.value,
                    payment_order_id=order_id,
                    payment_id=payment_id,
                    confirmed_at=now,
                    meeting_link=meeting_link(booking_id),
                    meeting_duration_minutes=slot.duration_minutes,
                )
            subscription.generated_bookings_count = len(slots)

            intent.status = IntentStatus.CONSUMED.value
            intent.subscription_id = subscription.id

            self._settle(student, tutor, subscription, order_id)
            self.notification_service.subscription_confirmed(subscription, student, tutor)

        self.log_operation(
            "subscription_activated",
            subscription_id=subscription.id,
            bookings=subscription.generated_bookings_count,
        )
        return subscription

    def _claim_slots(self, student: User, intent: SubscriptionIntent) -> List[AvailabilitySlot]:
        """Earliest free regular slots in the window that fit the student's calendar."""
        now = utcnow()
        wanted = intent.sessions_per_week * settings.subscription_weeks
        candidates = self.slot_repository.free_slots(
            intent.tutor_id,
            slot_type=SlotType.REGULAR.value,
            start_from=now,
            start_before=now + timedelta(weeks=settings.subscription_weeks),
        )

        chosen: List[AvailabilitySlot] = []
        for slot in candidates:
            if len(chosen) >= wanted:
                break
            if any(overlaps(slot.start_time, slot.end_time, c.start_time, c.end_time) for c in chosen):
                continue
            if self.conflict_checker.has_student_conflict(student.id, slot.start_time, slot.end_time):
                continue
            if self.availability_service.try_claim(slot):
                chosen.append(slot)
        if len(chosen) < wanted:
            self.logger.info(
                f"Only {len(chosen)} of {wanted} slots available for intent {intent.order_id}"
            )
        return chosen

    def _settle(self, student: User, tutor: User, subscription: Subscription, order_id: str) -> None:
        amount = to_money(subscription.amount)
        tutor_share, platform_share = split_share(amount, settings.tutor_share_percent)
        self.wallet_service.receive_from_gateway(
            student,
            amount,
            f"subscription:{order_id}:receipt",
            reference_type="subscription",
            reference_id=subscription.id,
            description=f"Payment for monthly plan with {tutor.display_name}",
        )
        self.wallet_service.distribute(
            LedgerEntryKind.SUBSCRIPTION_SETTLEMENT,
            f"subscription:{order_id}:settlement",
            self.wallet_service.ensure_wallet(student),
            [
                (self.wallet_service.ensure_wallet(tutor), tutor_share),
                (self.wallet_service.revenue_account(), platform_share),
            ],
            reference_type="subscription",
            reference_id=subscription.id,
            description=f"Monthly plan: {student.display_name} with {tutor.display_name}",
        )

    def my_subscriptions(self, student: User) -> List[Subscription]:
        return self.repository.list_for_student(student.id)
