from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
import json
from typing import Optional

import pytest
from sqlalchemy.orm import Session

from tuitiontime.core.config import settings
from tuitiontime.core.enums import BookingType, PlanType
from tuitiontime.core.exceptions import (
    BookingConflictException,
    BusinessRuleException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    PaymentVerificationException,
    UnauthorizedException,
    ValidationException,
)
from tuitiontime.integrations.razorpay_client import FakeRazorpayClient, compute_webhook_signature
from tuitiontime.models.availability import AvailabilitySlot
from tuitiontime.models.booking import Booking
from tuitiontime.models.regular_class import RegularClass
from tuitiontime.models.user import User
from tuitiontime.schemas.booking import BookingCreate
from tuitiontime.schemas.regular_class import SessionSlot, StartRegularClassRequest
from tuitiontime.services.booking_service import BookingService
from tuitiontime.services.class_session_service import ClassSessionService, session_window
from tuitiontime.services.payment_service import PaymentService, period_bounds
from tuitiontime.services.regular_class_service import RegularClassService
from tuitiontime.services.wallet_service import WalletService


@pytest.fixture
def demo_booking(db: Session, student: User, tutor: User, demo_slot: AvailabilitySlot) -> Booking:
    return BookingService(db).create_booking(
        student,
        BookingCreate(
            tutor_id=tutor.id,
            subject="Maths",
            booking_date=demo_slot.start_time.date(),
            start_time=demo_slot.start_time,
            end_time=demo_slot.end_time,
            booking_type=BookingType.DEMO,
        ),
    )


@pytest.fixture
def class_service(db: Session) -> RegularClassService:
    return RegularClassService(db)


def _start(
    class_service: RegularClassService,
    student: User,
    booking: Booking,
    gateway: FakeRazorpayClient,
    **overrides,
):
    request = StartRegularClassRequest(booking_id=booking.id, **overrides)
    return class_service.start_regular_from_demo(student, request, gateway)


def _webhook_body(event: str, order_id: Optional[str], payment_id: str) -> bytes:
    entity = {"id": payment_id}
    if order_id is not None:
        entity["order_id"] = order_id
    return json.dumps({"event": event, "payload": {"payment": {"entity": entity}}}).encode()


def _sign(body: bytes) -> str:
    return compute_webhook_signature(body, settings.razorpay_webhook_secret.get_secret_value())


@pytest.fixture
def paid_class(
    db: Session,
    class_service: RegularClassService,
    student: User,
    demo_booking: Booking,
    gateway: FakeRazorpayClient,
) -> RegularClass:
    order = _start(class_service, student, demo_booking, gateway)
    regular_class = order["regular_class"]
    return class_service.verify_class_payment(
        student,
        regular_class.id,
        order["order_id"],
        "pay_class_1",
        gateway.sign(order["order_id"], "pay_class_1"),
        gateway,
    )


class TestStartRegularClass:
    @pytest.mark.parametrize(
        "overrides,expected",
        [
            ({"plan_type": PlanType.MONTHLY}, Decimal("4000.00")),
            ({"plan_type": PlanType.HOURLY}, Decimal("500.00")),
            ({"plan_type": PlanType.WEEKLY, "sessions_per_week": 3}, Decimal("1500.00")),
            ({"plan_type": PlanType.CUSTOM, "amount": Decimal("2750.50")}, Decimal("2750.50")),
        ],
    )
    def test_plan_pricing(
        self,
        class_service: RegularClassService,
        student: User,
        demo_booking: Booking,
        gateway: FakeRazorpayClient,
        overrides,
        expected: Decimal,
    ) -> None:
        order = _start(class_service, student, demo_booking, gateway, **overrides)
        assert order["amount"] == expected
        assert order["regular_class"].payment_status == "pending"

    def test_repeat_call_returns_existing_order(
        self,
        class_service: RegularClassService,
        student: User,
        demo_booking: Booking,
        gateway: FakeRazorpayClient,
    ) -> None:
        first = _start(class_service, student, demo_booking, gateway)
        second = _start(class_service, student, demo_booking, gateway)
        assert first["order_id"] == second["order_id"]
        assert first["regular_class"].id == second["regular_class"].id

    def test_only_demo_owner_can_upgrade(
        self,
        class_service: RegularClassService,
        other_student: User,
        demo_booking: Booking,
        gateway: FakeRazorpayClient,
    ) -> None:
        with pytest.raises(NotFoundException):
            _start(class_service, other_student, demo_booking, gateway)

    def test_custom_plan_requires_amount(self, demo_booking: Booking) -> None:
        with pytest.raises(ValueError):
            StartRegularClassRequest(booking_id=demo_booking.id, plan_type=PlanType.CUSTOM)


class TestClassPayment:
    def test_verify_marks_class_paid_and_holds_escrow(
        self, db: Session, paid_class: RegularClass
    ) -> None:
        wallets = WalletService(db)
        assert paid_class.payment_status == "paid"
        assert paid_class.current_period_end > paid_class.current_period_start
        assert wallets.escrow_account().balance == Decimal("4000.00")
        assert wallets.check_invariant()["balanced"] is True

    def test_second_upgrade_of_paid_demo_conflicts(
        self,
        class_service: RegularClassService,
        paid_class: RegularClass,
        student: User,
        demo_booking: Booking,
        gateway: FakeRazorpayClient,
    ) -> None:
        with pytest.raises(ConflictException):
            _start(class_service, student, demo_booking, gateway)

    def test_order_must_belong_to_class(
        self,
        class_service: RegularClassService,
        paid_class: RegularClass,
        student: User,
        gateway: FakeRazorpayClient,
    ) -> None:
        with pytest.raises(PaymentVerificationException):
            class_service.verify_class_payment(
                student, paid_class.id, "order_unknown", "pay_1", "sig", gateway
            )


class TestWebhook:
    def test_capture_then_replay(
        self,
        db: Session,
        class_service: RegularClassService,
        student: User,
        demo_booking: Booking,
        gateway: FakeRazorpayClient,
    ) -> None:
        order = _start(class_service, student, demo_booking, gateway)
        body = _webhook_body("payment.captured", order["order_id"], "pay_hook_1")
        payments = PaymentService(db)

        assert payments.handle_webhook(body, _sign(body)) == "processed"
        assert payments.handle_webhook(body, _sign(body)) == "duplicate"
        assert order["regular_class"].payment_status == "paid"
        assert WalletService(db).escrow_account().balance == Decimal("4000.00")

    def test_failed_event_marks_class_failed(
        self,
        db: Session,
        class_service: RegularClassService,
        student: User,
        demo_booking: Booking,
        gateway: FakeRazorpayClient,
    ) -> None:
        order = _start(class_service, student, demo_booking, gateway)
        body = _webhook_body("payment.failed", order["order_id"], "pay_hook_2")

        assert PaymentService(db).handle_webhook(body, _sign(body)) == "processed"
        assert order["regular_class"].payment_status == "failed"

    def test_events_without_order_id_match_on_payment_id(
        self,
        db: Session,
        class_service: RegularClassService,
        student: User,
        demo_booking: Booking,
        gateway: FakeRazorpayClient,
    ) -> None:
        order = _start(class_service, student, demo_booking, gateway)
        payments = PaymentService(db)
        captured = _webhook_body("payment.captured", order["order_id"], "pay_hook_3")
        assert payments.handle_webhook(captured, _sign(captured)) == "processed"

        replay = _webhook_body("payment.captured", None, "pay_hook_3")
        late_failure = _webhook_body("payment.failed", None, "pay_hook_3")
        stranger = _webhook_body("payment.captured", None, "pay_unknown")

        assert payments.handle_webhook(replay, _sign(replay)) == "duplicate"
        assert payments.handle_webhook(late_failure, _sign(late_failure)) == "duplicate"
        assert payments.handle_webhook(stranger, _sign(stranger)) == "ignored"
        assert order["regular_class"].payment_status == "paid"

    def test_bad_signature_is_rejected(self, db: Session) -> None:
        body = _webhook_body("payment.captured", "order_x", "pay_x")
        with pytest.raises(UnauthorizedException):
            PaymentService(db).handle_webhook(body, "not-a-signature")

    def test_unknown_order_and_event_are_ignored(self, db: Session) -> None:
        payments = PaymentService(db)
        unknown = _webhook_body("payment.captured", "order_missing", "pay_missing")
        refund = _webhook_body("refund.processed", "order_missing", "pay_missing")

        assert payments.handle_webhook(unknown, _sign(unknown)) == "ignored"
        assert payments.handle_webhook(refund, _sign(refund)) == "ignored"

    def test_malformed_body(self, db: Session) -> None:
        body = b"not json"
        with pytest.raises(ValidationException):
            PaymentService(db).handle_webhook(body, _sign(body))


class TestPayouts:
    def test_period_bounds_cover_whole_days(self) -> None:
        start, end = period_bounds(date(2025, 1, 1), date(2025, 1, 31))
        assert start == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert end == datetime(2025, 2, 1, tzinfo=timezone.utc)

    def test_generate_and_settle(
        self, db: Session, paid_class: RegularClass, tutor: User
    ) -> None:
        payments = PaymentService(db)
        today = datetime.now(timezone.utc).date()

        payouts = payments.generate_payouts(today, today)

        assert len(payouts) == 1
        payout = payouts[0]
        assert payout.amount == Decimal("4000.00")
        assert payout.commission_amount == Decimal("1000.00")
        assert payout.tutor_net_amount == Decimal("3000.00")
        assert payments.generate_payouts(today, today) == []

        payments.settle_payout(payout.id)

        wallets = WalletService(db)
        assert payout.status == "settled"
        assert wallets.get_balance(tutor).balance == Decimal("3000.00")
        assert wallets.revenue_account().balance == Decimal("1000.00")
        assert wallets.escrow_account().balance == Decimal("0.00")
        assert payments.summary()["balanced"] is True
        with pytest.raises(ConflictException):
            payments.settle_payout(payout.id)

    def test_inverted_period(self, db: Session) -> None:
        with pytest.raises(ValidationException):
            PaymentService(db).generate_payouts(date(2025, 2, 1), date(2025, 1, 1))


class TestClassSessions:
    @staticmethod
    def _slot(days_ahead: int, start: str, end: Optional[str] = None) -> SessionSlot:
        day = datetime.now(timezone.utc).date() + timedelta(days=days_ahead)
        return SessionSlot(date=day, start_time=start, end_time=end)

    def test_session_window_defaults_to_an_hour(self) -> None:
        start, end = session_window(SessionSlot(date=date(2025, 5, 1), start_time="18:30"))
        assert end - start == timedelta(hours=1)

    def test_create_session_on_available_date(
        self, db: Session, paid_class: RegularClass, tutor: User
    ) -> None:
        session = ClassSessionService(db).create_session(tutor, paid_class.id, self._slot(3, "16:00"))

        assert session.status == "scheduled"
        assert session.attendance == "not-marked"
        assert session.meeting_link.endswith(session.id)

    def test_date_outside_availability(
        self, db: Session, paid_class: RegularClass, tutor: User
    ) -> None:
        with pytest.raises(BusinessRuleException) as exc_info:
            ClassSessionService(db).create_session(tutor, paid_class.id, self._slot(40, "16:00"))
        assert exc_info.value.code == "DATE_NOT_AVAILABLE"

    def test_only_class_tutor_schedules(
        self, db: Session, paid_class: RegularClass, other_tutor: User
    ) -> None:
        with pytest.raises(ForbiddenException):
            ClassSessionService(db).create_session(other_tutor, paid_class.id, self._slot(3, "16:00"))

    def test_unpaid_class_cannot_be_scheduled(
        self,
        db: Session,
        class_service: RegularClassService,
        student: User,
        tutor: User,
        demo_booking: Booking,
        gateway: FakeRazorpayClient,
    ) -> None:
        order = _start(class_service, student, demo_booking, gateway)
        with pytest.raises(BusinessRuleException):
            ClassSessionService(db).create_session(
                tutor, order["regular_class"].id, self._slot(3, "16:00")
            )

    def test_overlapping_session_conflicts(
        self, db: Session, paid_class: RegularClass, tutor: User
    ) -> None:
        sessions = ClassSessionService(db)
        sessions.create_session(tutor, paid_class.id, self._slot(4, "16:00"))
        with pytest.raises(BookingConflictException):
            sessions.create_session(tutor, paid_class.id, self._slot(4, "16:30", "17:30"))

    def test_bulk_reports_skipped_rows(
        self, db: Session, paid_class: RegularClass, tutor: User
    ) -> None:
        result = ClassSessionService(db).bulk_create(
            tutor,
            paid_class.id,
            [
                self._slot(5, "16:00"),
                self._slot(5, "16:30"),
                self._slot(40, "16:00"),
                self._slot(6, "16:00"),
            ],
        )

        assert len(result["created"]) == 2
        assert [row["index"] for row in result["skipped"]] == [1, 2]

    def test_mark_attendance_completes_session(
        self, db: Session, paid_class: RegularClass, tutor: User, student: User
    ) -> None:
        sessions = ClassSessionService(db)
        session = sessions.create_session(tutor, paid_class.id, self._slot(3, "16:00"))

        marked = sessions.mark_attendance(tutor, session.id, "present", "Covered algebra")

        assert marked.status == "completed"
        assert marked.attendance == "present"
        assert [s.id for s in sessions.student_sessions(student)] == [session.id]
