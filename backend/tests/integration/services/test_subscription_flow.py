from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from tuitiontime.core.enums import SlotType
from tuitiontime.core.exceptions import (
    BusinessRuleException,
    NotFoundException,
    PaymentVerificationException,
)
from tuitiontime.integrations.razorpay_client import FakeRazorpayClient
from tuitiontime.models.booking import Booking
from tuitiontime.models.user import User
from tuitiontime.services.subscription_service import SubscriptionService
from tuitiontime.services.wallet_service import WalletService

from tests.helpers.builders import make_slot, next_hour


@pytest.fixture
def subscription_service(db: Session) -> SubscriptionService:
    return SubscriptionService(db)


@pytest.fixture
def regular_slots(db: Session, tutor: User):
    return [
        make_slot(db, tutor, next_hour(days, 17), slot_type=SlotType.REGULAR) for days in (1, 2, 3)
    ]


class TestCheckout:
    def test_checkout_uses_tutor_monthly_rate(
        self, subscription_service: SubscriptionService, student: User, tutor: User, gateway: FakeRazorpayClient
    ) -> None:
        order = subscription_service.checkout(student, tutor.id, gateway, sessions_per_week=1)

        assert order["amount"] == Decimal("4000.00")
        assert order["amount_paise"] == 400000
        assert order["key_id"] == gateway.key_id
        assert order["receipt"].startswith("SUB-")

    def test_tutor_without_monthly_rate(
        self,
        subscription_service: SubscriptionService,
        student: User,
        other_tutor: User,
        gateway: FakeRazorpayClient,
    ) -> None:
        with pytest.raises(BusinessRuleException):
            subscription_service.checkout(student, other_tutor.id, gateway)

    def test_unknown_tutor(
        self, subscription_service: SubscriptionService, student: User, gateway: FakeRazorpayClient
    ) -> None:
        with pytest.raises(NotFoundException):
            subscription_service.checkout(student, student.id, gateway)


class TestVerify:
    def test_verify_books_free_regular_slots_and_settles(
        self,
        subscription_service: SubscriptionService,
        db: Session,
        student: User,
        tutor: User,
        regular_slots,
        gateway: FakeRazorpayClient,
    ) -> None:
        order = subscription_service.checkout(student, tutor.id, gateway, sessions_per_week=2)
        signature = gateway.sign(order["order_id"], "pay_sub_1")

        subscription = subscription_service.verify(
            student, order["order_id"], "pay_sub_1", signature, gateway
        )

        bookings = db.query(Booking).filter_by(subscription_id=subscription.id).all()
        assert subscription.generated_bookings_count == 3
        assert len(bookings) == 3
        assert all(slot.is_booked for slot in regular_slots)
        assert {booking.amount for booking in bookings} == {Decimal("1333.33")}
        assert subscription.end_date - subscription.start_date >= timedelta(days=28)

        wallets = WalletService(db)
        assert wallets.get_balance(tutor).balance == Decimal("3600.00")
        assert wallets.revenue_account().balance == Decimal("400.00")
        assert wallets.get_balance(student).balance == Decimal("0.00")
        assert wallets.check_invariant()["balanced"] is True

    def test_replayed_verify_returns_same_subscription(
        self,
        subscription_service: SubscriptionService,
        db: Session,
        student: User,
        tutor: User,
        regular_slots,
        gateway: FakeRazorpayClient,
    ) -> None:
        order = subscription_service.checkout(student, tutor.id, gateway)
        signature = gateway.sign(order["order_id"], "pay_sub_1")

        first = subscription_service.verify(student, order["order_id"], "pay_sub_1", signature, gateway)
        second = subscription_service.verify(student, order["order_id"], "pay_sub_1", signature, gateway)

        assert first.id == second.id
        assert db.query(Booking).count() == 3
        assert WalletService(db).get_balance(tutor).balance == Decimal("3600.00")

    def test_busy_student_slots_are_skipped(
        self,
        subscription_service: SubscriptionService,
        db: Session,
        student: User,
        tutor: User,
        other_tutor: User,
        regular_slots,
        gateway: FakeRazorpayClient,
    ) -> None:
        busy = regular_slots[0]
        db.add(
            Booking(
                student_id=student.id,
                tutor_id=other_tutor.id,
                subject="English",
                booking_date=busy.start_time.date(),
                start_time=busy.start_time,
                end_time=busy.end_time,
                booking_type="demo",
                amount=Decimal("0"),
                status="confirmed",
                payment_status="completed",
            )
        )
        db.commit()
        order = subscription_service.checkout(student, tutor.id, gateway)

        subscription = subscription_service.verify(
            student, order["order_id"], "pay_2", gateway.sign(order["order_id"], "pay_2"), gateway
        )

        assert subscription.generated_bookings_count == 2
        assert busy.is_booked is False

    def test_bad_signature(
        self, subscription_service: SubscriptionService, student: User, tutor: User, gateway: FakeRazorpayClient
    ) -> None:
        order = subscription_service.checkout(student, tutor.id, gateway)
        with pytest.raises(PaymentVerificationException):
            subscription_service.verify(student, order["order_id"], "pay_1", "bad", gateway)

    def test_intent_belongs_to_the_student(
        self,
        subscription_service: SubscriptionService,
        student: User,
        other_student: User,
        tutor: User,
        gateway: FakeRazorpayClient,
    ) -> None:
        order = subscription_service.checkout(student, tutor.id, gateway)
        signature = gateway.sign(order["order_id"], "pay_1")
        with pytest.raises(NotFoundException):
            subscription_service.verify(other_student, order["order_id"], "pay_1", signature, gateway)
