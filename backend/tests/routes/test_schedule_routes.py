from datetime import timedelta
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tuitiontime.core.enums import SlotType
from tuitiontime.core.timezone_utils import utcnow
from tuitiontime.integrations.razorpay_client import FakeRazorpayClient
from tuitiontime.models.availability import AvailabilitySlot
from tuitiontime.models.user import User

from tests.helpers.builders import make_slot, next_hour

API = "/api/v1"


def _verify_body(gateway: FakeRazorpayClient, order_id: str, payment_id: str) -> dict:
    return {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": gateway.sign(order_id, payment_id),
    }


class TestAvailabilityRoutes:
    def test_tutor_publishes_and_deletes_slots(
        self, client: TestClient, tutor_headers: Dict[str, str]
    ) -> None:
        start = next_hour(2, 9)
        response = client.post(
            f"{API}/availability",
            headers=tutor_headers,
            json={
                "slots": [
                    {
                        "start_time": start.isoformat(),
                        "end_time": (start + timedelta(minutes=30)).isoformat(),
                    },
                    {
                        "start_time": (start + timedelta(hours=1)).isoformat(),
                        "end_time": (start + timedelta(hours=2)).isoformat(),
                        "slot_type": "regular",
                    },
                ]
            },
        )

        assert response.status_code == 200, response.text
        created = response.json()["created"]
        assert [slot["duration_minutes"] for slot in created] == [30, 60]

        mine = client.get(f"{API}/availability/me", headers=tutor_headers).json()
        assert len(mine) == 2

        deleted = client.delete(f"{API}/availability/{created[0]['id']}", headers=tutor_headers)
        assert deleted.status_code == 204
        assert len(client.get(f"{API}/availability/me", headers=tutor_headers).json()) == 1

    def test_overlapping_batch(self, client: TestClient, tutor_headers: Dict[str, str]) -> None:
        start = next_hour(2, 9)
        slot = {"start_time": start.isoformat(), "end_time": (start + timedelta(hours=1)).isoformat()}
        shifted = {
            "start_time": (start + timedelta(minutes=30)).isoformat(),
            "end_time": (start + timedelta(minutes=90)).isoformat(),
        }

        response = client.post(f"{API}/availability", headers=tutor_headers, json={"slots": [slot, shifted]})

        assert response.status_code == 409
        assert response.json()["code"] == "AVAILABILITY_OVERLAP"

    def test_students_cannot_publish(self, client: TestClient, student_headers: Dict[str, str]) -> None:
        start = next_hour(2, 9)
        response = client.post(
            f"{API}/availability",
            headers=student_headers,
            json={"slots": [{"start_time": start.isoformat(), "end_time": (start + timedelta(hours=1)).isoformat()}]},
        )
        assert response.status_code == 403


class TestSubscriptionRoutes:
    def test_checkout_and_verify(
        self,
        client: TestClient,
        db: Session,
        tutor: User,
        student_headers: Dict[str, str],
        gateway: FakeRazorpayClient,
    ) -> None:
        for days in (1, 2):
            make_slot(db, tutor, next_hour(days, 17), slot_type=SlotType.REGULAR)

        order = client.post(
            f"{API}/subscriptions/checkout",
            headers=student_headers,
            json={"tutor_id": tutor.id, "sessions_per_week": 1, "subject": "Maths"},
        )
        assert order.status_code == 200, order.text
        order = order.json()
        assert order["amount"] == 4000.0

        verified = client.post(
            f"{API}/subscriptions/verify",
            headers=student_headers,
            json=_verify_body(gateway, order["order_id"], "pay_sub_route"),
        )
        assert verified.status_code == 201, verified.text
        subscription = verified.json()
        assert subscription["generated_bookings_count"] == 2
        assert {booking["amount"] for booking in subscription["bookings"]} == {2000.0}

        mine = client.get(f"{API}/subscriptions/mine", headers=student_headers).json()
        assert [item["id"] for item in mine] == [subscription["id"]]


@pytest.fixture
def paid_class_id(
    client: TestClient,
    student_headers: Dict[str, str],
    tutor: User,
    demo_slot: AvailabilitySlot,
    gateway: FakeRazorpayClient,
) -> str:
    booking = client.post(
        f"{API}/bookings",
        headers=student_headers,
        json={
            "tutor_id": tutor.id,
            "subject": "Maths",
            "booking_date": demo_slot.start_time.date().isoformat(),
            "start_time": demo_slot.start_time.isoformat(),
            "end_time": demo_slot.end_time.isoformat(),
        },
    ).json()
    order = client.post(
        f"{API}/regular-classes/start",
        headers=student_headers,
        json={"booking_id": booking["id"], "plan_type": "monthly"},
    ).json()
    class_id = order["regular_class"]["id"]
    paid = client.post(
        f"{API}/regular-classes/{class_id}/verify-payment",
        headers=student_headers,
        json=_verify_body(gateway, order["order_id"], "pay_class_route"),
    )
    assert paid.status_code == 200, paid.text
    assert paid.json()["payment_status"] == "paid"
    return class_id


class TestSessionRoutes:
    def test_schedule_and_mark_attendance(
        self,
        client: TestClient,
        tutor_headers: Dict[str, str],
        student_headers: Dict[str, str],
        paid_class_id: str,
    ) -> None:
        day = (utcnow() + timedelta(days=3)).date().isoformat()
        created = client.post(
            f"{API}/sessions",
            headers=tutor_headers,
            json={"regular_class_id": paid_class_id, "date": day, "start_time": "18:00"},
        )
        assert created.status_code == 201, created.text
        session = created.json()
        assert session["status"] == "scheduled"

        seen = client.get(f"{API}/sessions/mine", headers=student_headers).json()
        assert [item["id"] for item in seen] == [session["id"]]

        marked = client.patch(
            f"{API}/sessions/{session['id']}/attendance",
            headers=tutor_headers,
            json={"attendance": "present", "tutor_notes": "Covered quadratics"},
        )
        assert marked.status_code == 200
        assert marked.json()["attendance"] == "present"

    def test_bulk_reports_skipped_rows(
        self, client: TestClient, tutor_headers: Dict[str, str], paid_class_id: str
    ) -> None:
        day = (utcnow() + timedelta(days=4)).date().isoformat()
        response = client.post(
            f"{API}/sessions/bulk",
            headers=tutor_headers,
            json={
                "regular_class_id": paid_class_id,
                "sessions": [
                    {"date": day, "start_time": "16:00"},
                    {"date": day, "start_time": "16:30"},
                ],
            },
        )

        assert response.status_code == 200, response.text
        body = response.json()
        assert len(body["created"]) == 1
        assert [row["index"] for row in body["skipped"]] == [1]

        stored = client.get(
            f"{API}/sessions/mine",
            headers=tutor_headers,
            params={"regular_class_id": paid_class_id},
        ).json()
        assert [s["id"] for s in stored] == [body["created"][0]["id"]]

    def test_bad_time_format(
        self, client: TestClient, tutor_headers: Dict[str, str], paid_class_id: str
    ) -> None:
        response = client.post(
            f"{API}/sessions",
            headers=tutor_headers,
            json={"regular_class_id": paid_class_id, "date": "2030-01-01", "start_time": "6pm"},
        )
        assert response.status_code == 422


class TestPayoutRoutes:
    def test_generate_and_settle(
        self, client: TestClient, admin_headers: Dict[str, str], paid_class_id: str
    ) -> None:
        today = utcnow().date().isoformat()
        generated = client.post(
            f"{API}/payments/payouts/generate",
            headers=admin_headers,
            json={"period_start": today, "period_end": today},
        )
        assert generated.status_code == 200, generated.text
        payouts = generated.json()
        assert len(payouts) == 1
        assert payouts[0]["tutor_net_amount"] == 3000.0

        settled = client.post(
            f"{API}/payments/payouts/{payouts[0]['id']}/settle", headers=admin_headers
        )
        assert settled.json()["status"] == "settled"

        again = client.post(
            f"{API}/payments/payouts/{payouts[0]['id']}/settle", headers=admin_headers
        )
        assert again.status_code == 409

    def test_inverted_period(self, client: TestClient, admin_headers: Dict[str, str]) -> None:
        response = client.post(
            f"{API}/payments/payouts/generate",
            headers=admin_headers,
            json={"period_start": "2030-02-01", "period_end": "2030-01-01"},
        )
        assert response.status_code == 422
