from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from tuitiontime.core.enums import BookingStatus, BookingType, SlotType
from tuitiontime.core.exceptions import (
    BookingConflictException,
    BusinessRuleException,
    ConflictException,
    ForbiddenException,
    InvalidStateTransitionException,
    PaymentVerificationException,
    SlotUnavailableException,
)
from tuitiontime.integrations.razorpay_client import FakeRazorpayClient
from tuitiontime.models.availability import AvailabilitySlot
from tuitiontime.models.booking import Booking
from tuitiontime.models.user import User
from tuitiontime.schemas.booking import BookingCreate
from tuitiontime.services.booking_service import BookingService
from tuitiontime.services.wallet_service import WalletService

from tests.helpers.builders import make_slot, next_hour


@pytest.fixture
def booking_service(db: Session) -> BookingService:
    return BookingService(db)


def _request(tutor: User, slot: AvailabilitySlot, booking_type: BookingType = BookingType.DEMO) -> BookingCreate:
    return BookingCreate(
        tutor_id=tutor.id,
        subject="Maths",
        booking_date=slot.start_time.date(),
        start_time=slot.start_time,
        end_time=slot.end_time,
        booking_type=booking_type,
    )


def _paid_booking(
    booking_service: BookingService,
    student: User,
    tutor: User,
    slot: AvailabilitySlot,
    gateway: FakeRazorpayClient,
) -> Booking:
    booking = booking_service.create_booking(student, _request(tutor, slot))
    order = booking_service.convert_demo_to_paid(student, booking.id, gateway)
    return booking_service.verify_booking_payment(
        student,
        booking.id,
        order["order_id"],
        "pay_demo_1",
        gateway.sign(order["order_id"], "pay_demo_1"),
        gateway,
    )


class TestCreateBooking:
    def test_demo_is_free_and_confirmed(
        self, booking_service: BookingService, student: User, tutor: User, demo_slot: AvailabilitySlot
    ) -> None:
        booking = booking_service.create_booking(student, _request(tutor, demo_slot))

        assert booking.status == BookingStatus.CONFIRMED.value
        assert booking.amount == Decimal("0")
        assert booking.meeting_link.endswith(booking.id)
        assert demo_slot.is_booked is True

    def test_regular_booking_is_priced_by_the_hour(
        self, booking_service: BookingService, db: Session, student: User, tutor: User
    ) -> None:
        slot = make_slot(db, tutor, next_hour(2, 15), minutes=90, slot_type=SlotType.REGULAR)

        booking = booking_service.create_booking(student, _request(tutor, slot, BookingType.REGULAR))

        assert booking.status == BookingStatus.PENDING.value
        assert booking.amount == Decimal("750.00")

    def test_slot_can_only_be_booked_once(
        self,
        booking_service: BookingService,
        student: User,
        other_student: User,
        tutor: User,
        demo_slot: AvailabilitySlot,
    ) -> None:
        booking_service.create_booking(student, _request(tutor, demo_slot))
        with pytest.raises(SlotUnavailableException):
            booking_service.create_booking(other_student, _request(tutor, demo_slot))

    def test_unpublished_time_is_rejected(
        self, booking_service: BookingService, student: User, tutor: User, demo_slot: AvailabilitySlot
    ) -> None:
        request = _request(tutor, demo_slot)
        request = request.model_copy(update={"end_time": demo_slot.end_time + timedelta(minutes=15)})
        with pytest.raises(SlotUnavailableException):
            booking_service.create_booking(student, request)

    def test_one_demo_per_tutor_per_day(
        self, booking_service: BookingService, db: Session, student: User, tutor: User, demo_slot: AvailabilitySlot
    ) -> None:
        booking_service.create_booking(student, _request(tutor, demo_slot))
        later = make_slot(db, tutor, demo_slot.start_time + timedelta(hours=3), minutes=30)

        with pytest.raises(ConflictException) as exc_info:
            booking_service.create_booking(student, _request(tutor, later))
        assert exc_info.value.code == "DUPLICATE_DEMO"

    def test_student_calendar_clash(
        self,
        booking_service: BookingService,
        db: Session,
        student: User,
        tutor: User,
        other_tutor: User,
        demo_slot: AvailabilitySlot,
    ) -> None:
        booking_service.create_booking(student, _request(tutor, demo_slot))
        clashing = make_slot(db, other_tutor, demo_slot.start_time + timedelta(minutes=15))

        with pytest.raises(BookingConflictException) as exc_info:
            booking_service.create_booking(student, _request(other_tutor, clashing))
        assert exc_info.value.details["party"] == "student"
        assert clashing.is_booked is False


class TestStatusChanges:
    def test_student_cannot_confirm(
        self, booking_service: BookingService, db: Session, student: User, tutor: User
    ) -> None:
        slot = make_slot(db, tutor, next_hour(3, 9), slot_type=SlotType.REGULAR)
        booking = booking_service.create_booking(student, _request(tutor, slot, BookingType.REGULAR))

        with pytest.raises(ForbiddenException):
            booking_service.update_status(student, booking.id, BookingStatus.CONFIRMED)

    def test_other_tutor_cannot_touch_booking(
        self,
        booking_service: BookingService,
        student: User,
        tutor: User,
        other_tutor: User,
        demo_slot: AvailabilitySlot,
    ) -> None:
        booking = booking_service.create_booking(student, _request(tutor, demo_slot))
        with pytest.raises(ForbiddenException):
            booking_service.update_status(other_tutor, booking.id, BookingStatus.COMPLETED)

    def test_cancel_releases_slot(
        self, booking_service: BookingService, student: User, tutor: User, demo_slot: AvailabilitySlot
    ) -> None:
        booking = booking_service.create_booking(student, _request(tutor, demo_slot))

        cancelled = booking_service.cancel_booking(student, booking.id)

        assert cancelled.status == BookingStatus.CANCELLED.value
        assert cancelled.cancelled_by_id == student.id
        assert demo_slot.is_booked is False

    def test_cancelled_booking_is_terminal(
        self, booking_service: BookingService, student: User, tutor: User, demo_slot: AvailabilitySlot
    ) -> None:
        booking = booking_service.create_booking(student, _request(tutor, demo_slot))
        booking_service.cancel_booking(student, booking.id)

        with pytest.raises(InvalidStateTransitionException):
            booking_service.update_status(tutor, booking.id, BookingStatus.CONFIRMED)

    def test_completed_booking_cannot_be_cancelled(
        self, booking_service: BookingService, student: User, tutor: User, demo_slot: AvailabilitySlot
    ) -> None:
        booking = booking_service.create_booking(student, _request(tutor, demo_slot))
        booking_service.update_status(tutor, booking.id, BookingStatus.COMPLETED)

        with pytest.raises(BusinessRuleException):
            booking_service.cancel_booking(student, booking.id)


class TestDemoConversion:
    def test_convert_reuses_open_order(
        self,
        booking_service: BookingService,
        student: User,
        tutor: User,
        demo_slot: AvailabilitySlot,
        gateway: FakeRazorpayClient,
    ) -> None:
        booking = booking_service.create_booking(student, _request(tutor, demo_slot))

        first = booking_service.convert_demo_to_paid(student, booking.id, gateway)
        second = booking_service.convert_demo_to_paid(student, booking.id, gateway)

        assert first["order_id"] == second["order_id"]
        assert first["amount"] == Decimal("500.00")
        assert first["amount_paise"] == 50000
        assert len(gateway.orders) == 1

    def test_verify_moves_money_into_escrow(
        self,
        booking_service: BookingService,
        db: Session,
        student: User,
        tutor: User,
        demo_slot: AvailabilitySlot,
        gateway: FakeRazorpayClient,
    ) -> None:
        booking = _paid_booking(booking_service, student, tutor, demo_slot, gateway)
        wallets = WalletService(db)

        assert booking.payment_status == "completed"
        assert booking.booking_type == BookingType.REGULAR.value
        assert booking.escrow_amount == Decimal("500.00")
        assert wallets.escrow_account().balance == Decimal("500.00")
        assert wallets.get_balance(student).balance == Decimal("0.00")
        assert wallets.check_invariant()["balanced"] is True

    def test_verify_is_idempotent_for_the_same_payment(
        self,
        booking_service: BookingService,
        db: Session,
        student: User,
        tutor: User,
        demo_slot: AvailabilitySlot,
        gateway: FakeRazorpayClient,
    ) -> None:
        booking = _paid_booking(booking_service, student, tutor, demo_slot, gateway)
        order_id = booking.payment_order_id

        booking_service.verify_booking_payment(
            student, booking.id, order_id, "pay_demo_1", gateway.sign(order_id, "pay_demo_1"), gateway
        )
        with pytest.raises(PaymentVerificationException):
            booking_service.verify_booking_payment(
                student, booking.id, order_id, "pay_other", gateway.sign(order_id, "pay_other"), gateway
            )
        assert WalletService(db).escrow_account().balance == Decimal("500.00")

    def test_bad_signature_changes_nothing(
        self,
        booking_service: BookingService,
        student: User,
        tutor: User,
        demo_slot: AvailabilitySlot,
        gateway: FakeRazorpayClient,
    ) -> None:
        booking = booking_service.create_booking(student, _request(tutor, demo_slot))
        order = booking_service.convert_demo_to_paid(student, booking.id, gateway)

        with pytest.raises(PaymentVerificationException):
            booking_service.verify_booking_payment(
                student, booking.id, order["order_id"], "pay_1", "forged", gateway
            )
        assert booking.payment_status == "initiated"

    def test_completion_releases_escrow_to_tutor(
        self,
        booking_service: BookingService,
        db: Session,
        student: User,
        tutor: User,
        demo_slot: AvailabilitySlot,
        gateway: FakeRazorpayClient,
    ) -> None:
        booking = _paid_booking(booking_service, student, tutor, demo_slot, gateway)

        booking_service.update_status(tutor, booking.id, BookingStatus.COMPLETED)

        wallets = WalletService(db)
        assert wallets.get_balance(tutor).balance == Decimal("450.00")
        assert wallets.revenue_account().balance == Decimal("50.00")
        assert wallets.escrow_account().balance == Decimal("0.00")
        assert wallets.check_invariant()["balanced"] is True

    def test_cancellation_refunds_student(
        self,
        booking_service: BookingService,
        db: Session,
        student: User,
        tutor: User,
        demo_slot: AvailabilitySlot,
        gateway: FakeRazorpayClient,
    ) -> None:
        booking = _paid_booking(booking_service, student, tutor, demo_slot, gateway)

        cancelled = booking_service.cancel_booking(student, booking.id)

        assert cancelled.payment_status == "refunded"
        assert WalletService(db).get_balance(student).balance == Decimal("500.00")


class TestRating:
    def test_rating_requires_completion(
        self, booking_service: BookingService, student: User, tutor: User, demo_slot: AvailabilitySlot
    ) -> None:
        booking = booking_service.create_booking(student, _request(tutor, demo_slot))
        with pytest.raises(BusinessRuleException):
            booking_service.rate_booking(student, booking.id, 5)

    def test_rating_updates_tutor_average(
        self, booking_service: BookingService, student: User, tutor: User, demo_slot: AvailabilitySlot
    ) -> None:
        booking = booking_service.create_booking(student, _request(tutor, demo_slot))
        booking_service.update_status(tutor, booking.id, BookingStatus.COMPLETED)

        booking_service.rate_booking(student, booking.id, 4, "Clear explanations")

        assert tutor.tutor_profile.rating == 4.0
