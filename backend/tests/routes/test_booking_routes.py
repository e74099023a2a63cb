from typing import Dict

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tuitiontime.integrations.razorpay_client import FakeRazorpayClient
from tuitiontime.models.availability import AvailabilitySlot
from tuitiontime.models.user import User

from tests.helpers.builders import auth_headers, make_slot, next_hour

API = "/api/v1/bookings"


def _book(client: TestClient, headers: Dict[str, str], tutor: User, slot: AvailabilitySlot):
    return client.post(
        API,
        headers=headers,
        json={
            "tutor_id": tutor.id,
            "subject": "Maths",
            "booking_date": slot.start_time.date().isoformat(),
            "start_time": slot.start_time.isoformat(),
            "end_time": slot.end_time.isoformat(),
            "booking_type": "demo",
        },
    )


class TestBookingRoutes:
    def test_student_books_demo(
        self,
        client: TestClient,
        student_headers: Dict[str, str],
        tutor: User,
        demo_slot: AvailabilitySlot,
    ) -> None:
        response = _book(client, student_headers, tutor, demo_slot)

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["status"] == "confirmed"
        assert body["amount"] == 0
        assert body["meeting_link"].startswith("https://meet.jit.si/")

        listing = client.get(API, headers=student_headers).json()
        assert listing["total"] == 1
        assert listing["items"][0]["id"] == body["id"]

    def test_listing_is_paginated(
        self,
        client: TestClient,
        db: Session,
        student_headers: Dict[str, str],
        tutor: User,
    ) -> None:
        for days_ahead in (1, 2, 3):
            slot = make_slot(db, tutor, next_hour(days_ahead, 10), minutes=30)
            assert _book(client, student_headers, tutor, slot).status_code == 201

        listing = client.get(
            API, headers=student_headers, params={"page": 2, "per_page": 1}
        ).json()

        assert len(listing["items"]) == 1
        assert listing["total"] == 3
        assert listing["has_next"] is True
        assert listing["has_prev"] is True

        last = client.get(API, headers=student_headers, params={"page": 3, "per_page": 1}).json()
        assert len(last["items"]) == 1
        assert last["has_next"] is False

    def test_tutor_cannot_create_booking(
        self,
        client: TestClient,
        tutor_headers: Dict[str, str],
        tutor: User,
        demo_slot: AvailabilitySlot,
    ) -> None:
        response = _book(client, tutor_headers, tutor, demo_slot)
        assert response.status_code == 403

    def test_double_booking_is_a_conflict(
        self,
        client: TestClient,
        student_headers: Dict[str, str],
        tutor: User,
        demo_slot: AvailabilitySlot,
    ) -> None:
        _book(client, student_headers, tutor, demo_slot)
        response = _book(client, student_headers, tutor, demo_slot)

        assert response.status_code == 409
        assert response.json()["code"] == "SLOT_UNAVAILABLE"

    def test_tutor_lists_and_completes(
        self,
        client: TestClient,
        student_headers: Dict[str, str],
        tutor_headers: Dict[str, str],
        tutor: User,
        demo_slot: AvailabilitySlot,
    ) -> None:
        booking = _book(client, student_headers, tutor, demo_slot).json()

        listed = client.get(f"{API}/tutor", headers=tutor_headers, params={"status": "confirmed"})
        assert [item["id"] for item in listed.json()] == [booking["id"]]

        completed = client.patch(
            f"{API}/{booking['id']}/status", headers=tutor_headers, json={"status": "completed"}
        )
        assert completed.status_code == 200
        assert completed.json()["status"] == "completed"

        rated = client.post(
            f"{API}/{booking['id']}/rate", headers=student_headers, json={"rating": 5}
        )
        assert rated.status_code == 200
        assert rated.json()["rating"] == 5

    def test_invalid_transition_is_unprocessable(
        self,
        client: TestClient,
        student_headers: Dict[str, str],
        tutor_headers: Dict[str, str],
        tutor: User,
        demo_slot: AvailabilitySlot,
    ) -> None:
        booking = _book(client, student_headers, tutor, demo_slot).json()
        client.post(f"{API}/{booking['id']}/cancel", headers=student_headers)

        response = client.patch(
            f"{API}/{booking['id']}/status", headers=tutor_headers, json={"status": "confirmed"}
        )
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_STATE_TRANSITION"

    def test_stranger_cannot_read_booking(
        self,
        client: TestClient,
        student_headers: Dict[str, str],
        other_student: User,
        tutor: User,
        demo_slot: AvailabilitySlot,
    ) -> None:
        booking = _book(client, student_headers, tutor, demo_slot).json()
        response = client.get(f"{API}/{booking['id']}", headers=auth_headers(other_student))
        assert response.status_code == 403

    def test_convert_and_verify_payment(
        self,
        client: TestClient,
        student_headers: Dict[str, str],
        tutor: User,
        demo_slot: AvailabilitySlot,
        gateway: FakeRazorpayClient,
    ) -> None:
        booking = _book(client, student_headers, tutor, demo_slot).json()

        order = client.post(f"{API}/{booking['id']}/convert", headers=student_headers).json()
        assert order["amount_paise"] == 50000
        assert order["key_id"] == gateway.key_id

        verified = client.post(
            f"{API}/{booking['id']}/verify-payment",
            headers=student_headers,
            json={
                "razorpay_order_id": order["order_id"],
                "razorpay_payment_id": "pay_route_1",
                "razorpay_signature": gateway.sign(order["order_id"], "pay_route_1"),
            },
        )
        assert verified.status_code == 200, verified.text
        assert verified.json()["payment_status"] == "completed"
        assert verified.json()["escrow_amount"] == 500.0

        wallet = client.get("/api/v1/wallet", headers=student_headers).json()
        assert wallet["balance"] == 0.0
