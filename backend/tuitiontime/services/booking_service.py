# backend/tuitiontime/services/booking_service.py
"""
Booking Service for the TuitionTime platform

Handles all booking-related business logic including:
- Creating demo and regular bookings against published tutor slots
- Status changes through the booking state machine
- Converting a demo into a paid class (gateway order + verification)
- Escrow release on completion and refunds on cancellation
- Ratings

Every multi-step change (claim slot + create booking, capture payment +
ledger postings, cancel + release slot + refund) commits as one
transaction. Gateway orders are created before the transaction opens.
"""

from datetime import datetime
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import (
    BookingStatus,
    BookingType,
    GatewayPaymentStatus,
    GatewayPaymentType,
    LedgerEntryKind,
    PaymentStatus,
    UserRole,
)
from ..core.exceptions import (
    BusinessRuleException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    PaymentVerificationException,
    SlotUnavailableException,
)
from ..core.money import ZERO, split_share, to_money, to_paise
from ..core.timezone_utils import ensure_utc, utcnow
from ..core.ulid_helper import generate_ulid
from ..domain.booking_transitions import ensure_transition
from ..integrations.razorpay_client import RazorpayClient
from ..models.booking import Booking
from ..models.profiles import TutorProfile
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import BookingCreate
from .availability_service import AvailabilityService
from .base import BaseService
from .conflict_checker import ConflictChecker
from .meeting import meeting_link
from .notification_service import NotificationService
from .payment_gateway import create_gateway_order, verify_checkout_signature
from .wallet_service import WalletService

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Centralizes all booking business logic and coordinates
    with other services.
    """

    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        wallet_service: Optional[WalletService] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.slot_repository = RepositoryFactory.create_availability_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.tutor_profile_repository = RepositoryFactory.create_tutor_profile_repository(db)
        self.availability_service = AvailabilityService(db)
        self.conflict_checker = ConflictChecker(db)
        self.notification_service = notification_service or NotificationService(db)
        self.wallet_service = wallet_service or WalletService(db)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_booking")
    def create_booking(self, student: User, booking_data: BookingCreate) -> Booking:
        """
        Book a published slot for a student.

        Demo bookings are free and confirmed immediately. Regular bookings
        are priced at the tutor's hourly rate and wait for confirmation.

        Raises:
            NotFoundException: tutor does not exist
            SlotUnavailableException: no free slot with this exact range
            ConflictException: second demo with the same tutor on one day
            BookingConflictException: either calendar is busy
        """
        tutor = self._get_tutor(booking_data.tutor_id)
        start = ensure_utc(booking_data.start_time)
        end = ensure_utc(booking_data.end_time)
        booking_type = BookingType(booking_data.booking_type)

        slot = self.slot_repository.find_exact(tutor.id, start, end, booking_type.value)
        if slot is None or slot.is_booked:
            raise SlotUnavailableException(
                slot.id if slot else None, "No free slot matches the requested time"
            )

        if booking_type == BookingType.DEMO and self.repository.has_demo_on_date(
            student.id, tutor.id, booking_data.booking_date
        ):
            raise ConflictException(
                "You already have a demo with this tutor on this date", code="DUPLICATE_DEMO"
            )

        self.conflict_checker.ensure_no_conflicts(
            tutor_id=tutor.id, student_id=student.id, start_time=start, end_time=end
        )

        booking_id = generate_ulid()
        fields: Dict[str, Any] = {
            "id": booking_id,
            "student_id": student.id,
            "tutor_id": tutor.id,
            "slot_id": slot.id,
            "subject": booking_data.subject,
            "booking_date": booking_data.booking_date,
            "start_time": start,
            "end_time": end,
            "booking_type": booking_type.value,
            "note": booking_data.note,
            "meeting_link": meeting_link(booking_id),
        }
        if booking_type == BookingType.DEMO:
            fields.update(
                amount=ZERO,
                status=BookingStatus.CONFIRMED.value,
                payment_status=PaymentStatus.COMPLETED.value,
                confirmed_at=utcnow(),
                meeting_duration_minutes=settings.demo_duration_minutes,
            )
        else:
            fields.update(
                amount=self._regular_amount(tutor, start, end),
                status=BookingStatus.PENDING.value,
                payment_status=PaymentStatus.PENDING.value,
                meeting_duration_minutes=slot.duration_minutes,
            )

        with self.transaction():
            self.availability_service.claim_slot(slot)
            booking = self.repository.create(**fields)
            self.notification_service.booking_created(booking, student, tutor)

        self.log_operation(
            "booking_created",
            booking_id=booking.id,
            booking_type=booking.booking_type,
            tutor_id=tutor.id,
            student_id=student.id,
        )
        return booking

    def _get_tutor(self, tutor_id: str) -> User:
        tutor = self.user_repository.get_with_profiles(tutor_id)
        if tutor is None or tutor.role != UserRole.TUTOR.value or not tutor.is_active:
            raise NotFoundException("Tutor not found")
        return tutor

    @staticmethod
    def _regular_amount(tutor: User, start: datetime, end: datetime) -> Decimal:
        profile = tutor.tutor_profile
        if profile is None or not profile.hourly_rate:
            raise BusinessRuleException(
                "Tutor has not set an hourly rate", code="TUTOR_RATE_MISSING"
            )
        hours = Decimal(int((end - start).total_seconds())) / Decimal(3600)
        return to_money(Decimal(profile.hourly_rate) * hours)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_tutor_bookings(
        self,
        tutor: User,
        status: Optional[BookingStatus] = None,
        booking_type: Optional[BookingType] = None,
    ) -> List[Booking]:
        return self.repository.list_for_tutor(
            tutor.id,
            status=BookingStatus(status).value if status else None,
            booking_type=BookingType(booking_type).value if booking_type else None,
        )

    def list_my_bookings(
        self, user: User, page: int = 1, per_page: int = DEFAULT_PAGE_SIZE
    ) -> Tuple[List[Booking], int]:
        if user.is_admin:
            return self.repository.list_page(page=page, per_page=per_page)
        if user.is_tutor:
            return self.repository.list_page(page=page, per_page=per_page, tutor_id=user.id)
        return self.repository.list_page(page=page, per_page=per_page, student_id=user.id)

    def get_booking(self, user: User, booking_id: str) -> Booking:
        booking = self.repository.get_with_participants(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")
        if not user.is_admin and not booking.is_participant(user.id):
            raise ForbiddenException("You do not have access to this booking")
        return booking

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    @BaseService.measure_operation("update_booking_status")
    def update_status(self, actor: User, booking_id: str, status: BookingStatus) -> Booking:
        """
        Move a booking through the state machine.

        Cancelling releases the slot and refunds any captured payment held
        in escrow. Completing releases the escrow to the tutor, less the
        platform's share.
        """
        booking = self.get_booking(actor, booking_id)
        if actor.is_tutor and booking.tutor_id != actor.id:
            raise ForbiddenException("Only the booking's tutor can change its status")
        if actor.is_student and booking.student_id != actor.id:
            raise ForbiddenException("Only the booking's student can change its status")

        target = ensure_transition(booking.status, BookingStatus(status).value, actor.role)
        now = utcnow()

        with self.transaction():
            booking.status = target.value
            if target == BookingStatus.CONFIRMED:
                booking.confirmed_at = now
            elif target == BookingStatus.COMPLETED:
                booking.completed_at = now
                self._release_escrow(booking)
            elif target == BookingStatus.CANCELLED:
                booking.cancelled_at = now
                booking.cancelled_by_id = actor.id
                self.availability_service.release_slot(booking.slot_id)
                self._refund_escrow(booking)
            self.notification_service.booking_status_changed(
                booking, actor, [booking.student, booking.tutor]
            )

        self.log_operation(
            "booking_status_changed", booking_id=booking.id, status=target.value, actor_id=actor.id
        )
        return booking

    def cancel_booking(self, student: User, booking_id: str) -> Booking:
        booking = self.get_booking(student, booking_id)
        if booking.student_id != student.id:
            raise ForbiddenException("Only the student who booked can cancel this booking")
        if booking.status == BookingStatus.COMPLETED.value:
            raise BusinessRuleException("Completed bookings cannot be cancelled")
        return self.update_status(student, booking_id, BookingStatus.CANCELLED)

    def _release_escrow(self, booking: Booking) -> None:
        held = to_money(booking.escrow_amount or ZERO)
        if held <= ZERO:
            return
        tutor_share, platform_share = split_share(held, settings.tutor_share_percent)
        tutor_wallet = self.wallet_service.ensure_wallet(booking.tutor)
        self.wallet_service.distribute(
            LedgerEntryKind.BOOKING_RELEASE,
            f"booking:{booking.id}:release",
            self.wallet_service.escrow_account(),
            [(tutor_wallet, tutor_share), (self.wallet_service.revenue_account(), platform_share)],
            reference_type="booking",
            reference_id=booking.id,
            description=f"Class completed: {booking.subject}",
        )
        booking.escrow_amount = ZERO

    def _refund_escrow(self, booking: Booking) -> None:
        held = to_money(booking.escrow_amount or ZERO)
        if held <= ZERO:
            return
        self.wallet_service.distribute(
            LedgerEntryKind.BOOKING_REFUND,
            f"booking:{booking.id}:refund",
            self.wallet_service.escrow_account(),
            [(self.wallet_service.ensure_wallet(booking.student), held)],
            reference_type="booking",
            reference_id=booking.id,
            description=f"Refund for cancelled class: {booking.subject}",
        )
        booking.escrow_amount = ZERO
        booking.payment_status = PaymentStatus.REFUNDED.value
        self.logger.info(f"Refunded {held} for booking {booking.id} to student wallet")

    # ------------------------------------------------------------------
    # Demo to paid conversion
    # ------------------------------------------------------------------

    @BaseService.measure_operation("convert_demo_to_paid")
    def convert_demo_to_paid(
        self, student: User, booking_id: str, gateway: RazorpayClient
    ) -> Dict[str, Any]:
        """
        Create (or return the existing) gateway order for a demo booking.

        Returns the order details the client passes to Razorpay Checkout.
        """
        booking = self._get_student_booking(student, booking_id)
        if booking.booking_type != BookingType.DEMO.value:
            raise BusinessRuleException("Only demo bookings can be converted to paid classes")
        if booking.status == BookingStatus.CANCELLED.value:
            raise BusinessRuleException("Cancelled bookings cannot be paid for")
        if booking.payment_status == PaymentStatus.COMPLETED.value and booking.payment_id:
            raise ConflictException("This booking has already been paid for", code="ALREADY_PAID")

        if booking.payment_order_id and booking.payment_status == PaymentStatus.INITIATED.value:
            return self._order_details(booking, booking.payment_order_id, gateway.key_id)

        amount = to_money(booking.amount or ZERO)
        if amount <= ZERO:
            profile = self.tutor_profile_repository.get_by_user_id(booking.tutor_id)
            if profile is None or not profile.hourly_rate:
                raise BusinessRuleException(
                    "Tutor has not set an hourly rate", code="TUTOR_RATE_MISSING"
                )
            amount = to_money(profile.hourly_rate)

        order = create_gateway_order(
            gateway,
            amount,
            booking.id,
            notes={"booking_id": booking.id, "student_id": student.id},
        )
        with self.transaction():
            booking.amount = amount
            booking.payment_status = PaymentStatus.INITIATED.value
            booking.payment_order_id = order["id"]
            self.payment_repository.create(
                payment_type=GatewayPaymentType.BOOKING.value,
                user_id=student.id,
                tutor_id=booking.tutor_id,
                booking_id=booking.id,
                gateway_order_id=order["id"],
                amount=amount,
                currency=settings.currency,
                status=GatewayPaymentStatus.CREATED.value,
            )
        self.logger.info(f"Booking {booking.id} payment initiated with order {order['id']}")
        return self._order_details(booking, order["id"], gateway.key_id)

    @staticmethod
    def _order_details(booking: Booking, order_id: str, key_id: str) -> Dict[str, Any]:
        return {
            "booking_id": booking.id,
            "order_id": order_id,
            "amount": to_money(booking.amount),
            "amount_paise": to_paise(booking.amount),
            "currency": settings.currency,
            "key_id": key_id,
            "receipt": booking.id,
        }

    @BaseService.measure_operation("verify_booking_payment")
    def verify_booking_payment(
        self,
        student: User,
        booking_id: str,
        order_id: str,
        payment_id: str,
        signature: str,
        gateway: RazorpayClient,
    ) -> Booking:
        """
        Confirm a converted booking once the gateway signature checks out.

        The captured amount moves from the gateway into the student's
        wallet and on into platform escrow until the class completes.
        Verifying the same payment again returns the booking unchanged.
        """
        booking = self._get_student_booking(student, booking_id)
        if not booking.payment_order_id or booking.payment_order_id != order_id:
            raise PaymentVerificationException("Order does not match this booking")
        verify_checkout_signature(gateway, order_id, payment_id, signature)

        if booking.payment_status == PaymentStatus.COMPLETED.value and booking.payment_id:
            if booking.payment_id == payment_id:
                return booking
            raise PaymentVerificationException("Booking was already paid by another payment")
        if booking.status == BookingStatus.CANCELLED.value:
            raise BusinessRuleException("Cancelled bookings cannot be paid for")

        amount = to_money(booking.amount)
        with self.transaction():
            booking.payment_status = PaymentStatus.COMPLETED.value
            booking.payment_id = payment_id
            booking.booking_type = BookingType.REGULAR.value
            if booking.status == BookingStatus.PENDING.value:
                booking.status = BookingStatus.CONFIRMED.value
            if booking.confirmed_at is None:
                booking.confirmed_at = utcnow()

            payment = self.payment_repository.get_by_order_id(order_id)
            if payment is not None:
                payment.status = GatewayPaymentStatus.PAID.value
                payment.gateway_payment_id = payment_id
                payment.paid_at = utcnow()

            self.wallet_service.receive_from_gateway(
                student,
                amount,
                f"booking:{booking.id}:receipt",
                reference_type="booking",
                reference_id=booking.id,
                description=f"Payment for {booking.subject} class",
            )
            self.wallet_service.distribute(
                LedgerEntryKind.BOOKING_ESCROW,
                f"booking:{booking.id}:escrow",
                self.wallet_service.ensure_wallet(student),
                [(self.wallet_service.escrow_account(), amount)],
                reference_type="booking",
                reference_id=booking.id,
                description=f"Held until {booking.subject} class completes",
            )
            booking.escrow_amount = amount
            if booking.status == BookingStatus.COMPLETED.value:
                self._release_escrow(booking)

        self.log_operation("booking_payment_verified", booking_id=booking.id, order_id=order_id)
        return booking

    # ------------------------------------------------------------------
    # Ratings
    # ------------------------------------------------------------------

    @BaseService.measure_operation("rate_booking")
    def rate_booking(
        self, student: User, booking_id: str, rating: int, feedback: Optional[str] = None
    ) -> Booking:
        booking = self._get_student_booking(student, booking_id)
        if booking.status != BookingStatus.COMPLETED.value:
            raise BusinessRuleException("Only completed classes can be rated")

        with self.transaction():
            booking.rating = rating
            booking.feedback = feedback
            self.db.flush()
            self._refresh_tutor_rating(booking.tutor_id)
        return booking

    def _refresh_tutor_rating(self, tutor_id: str) -> None:
        average = (
            self.db.query(func.avg(Booking.rating))
            .filter(Booking.tutor_id == tutor_id, Booking.rating.isnot(None))
            .scalar()
        )
        profile: Optional[TutorProfile] = self.tutor_profile_repository.get_by_user_id(tutor_id)
        if profile is not None and average is not None:
            profile.rating = round(float(average), 2)

    def _get_student_booking(self, student: User, booking_id: str) -> Booking:
        booking = self.repository.get_with_participants(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")
        if booking.student_id != student.id:
            raise ForbiddenException("You do not have access to this booking")
        return booking
