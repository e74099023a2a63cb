import json
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from tuitiontime.core.config import settings
from tuitiontime.integrations.razorpay_client import compute_webhook_signature
from tuitiontime.models.availability import AvailabilitySlot
from tuitiontime.models.user import User

API = "/api/v1"


def _webhook(client: TestClient, event: str, order_id: str, payment_id: str, signature=None):
    body = json.dumps(
        {
            "event": event,
            "payload": {"payment": {"entity": {"id": payment_id, "order_id": order_id}}},
        }
    ).encode()
    if signature is None:
        signature = compute_webhook_signature(body, settings.razorpay_webhook_secret.get_secret_value())
    return client.post(
        f"{API}/payments/webhook",
        content=body,
        headers={"X-Razorpay-Signature": signature, "Content-Type": "application/json"},
    )


@pytest.fixture
def class_order(
    client: TestClient,
    student_headers: Dict[str, str],
    tutor: User,
    demo_slot: AvailabilitySlot,
) -> dict:
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
    response = client.post(
        f"{API}/regular-classes/start",
        headers=student_headers,
        json={"booking_id": booking["id"], "plan_type": "monthly"},
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestWebhookRoute:
    def test_captured_event_activates_class(
        self, client: TestClient, student_headers: Dict[str, str], class_order: dict
    ) -> None:
        assert class_order["amount"] == 4000.0

        first = _webhook(client, "payment.captured", class_order["order_id"], "pay_hook_1")
        second = _webhook(client, "payment.captured", class_order["order_id"], "pay_hook_1")

        assert first.json() == {"received": True, "status": "processed"}
        assert second.json()["status"] == "duplicate"

        class_id = class_order["regular_class"]["id"]
        regular_class = client.get(f"{API}/regular-classes/{class_id}", headers=student_headers)
        assert regular_class.json()["payment_status"] == "paid"

    def test_bad_signature(self, client: TestClient, class_order: dict) -> None:
        response = _webhook(
            client, "payment.captured", class_order["order_id"], "pay_hook_2", signature="forged"
        )
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_SIGNATURE"

    def test_missing_signature_header(self, client: TestClient) -> None:
        response = client.post(f"{API}/payments/webhook", content=b"{}")
        assert response.status_code == 401

    def test_unknown_event_is_ignored(self, client: TestClient, class_order: dict) -> None:
        response = _webhook(client, "refund.created", class_order["order_id"], "pay_hook_3")
        assert response.json()["status"] == "ignored"

    def test_ledger_summary_for_admin(
        self, client: TestClient, admin_headers: Dict[str, str], class_order: dict
    ) -> None:
        _webhook(client, "payment.captured", class_order["order_id"], "pay_hook_4")

        summary = client.get(f"{API}/payments/summary", headers=admin_headers)

        assert summary.status_code == 200
        assert summary.json()["balanced"] is True


class TestTutorSwitchRoutes:
    def test_switch_request_lifecycle(
        self,
        client: TestClient,
        student_headers: Dict[str, str],
        admin_headers: Dict[str, str],
        class_order: dict,
        other_tutor: User,
    ) -> None:
        class_id = class_order["regular_class"]["id"]
        created = client.post(
            f"{API}/tutor-switch",
            headers=student_headers,
            json={"regular_class_id": class_id, "reason": "Timings do not suit me"},
        )
        assert created.status_code == 201
        request_id = created.json()["id"]

        duplicate = client.post(
            f"{API}/tutor-switch",
            headers=student_headers,
            json={"regular_class_id": class_id, "reason": "Again"},
        )
        assert duplicate.status_code == 409

        feed = client.get(f"{API}/notifications/admin", headers=admin_headers).json()
        assert "Tutor switch requested" in [item["title"] for item in feed["items"]]

        updated = client.patch(
            f"{API}/tutor-switch/{request_id}",
            headers=admin_headers,
            json={"status": "resolved", "to_tutor_id": other_tutor.id, "admin_note": "Moved"},
        )
        assert updated.status_code == 200, updated.text
        assert updated.json()["to_tutor_id"] == other_tutor.id

        mine = client.get(f"{API}/tutor-switch/mine", headers=student_headers).json()
        assert [item["status"] for item in mine] == ["resolved"]

    def test_switch_to_current_tutor_is_rejected(
        self,
        client: TestClient,
        student_headers: Dict[str, str],
        admin_headers: Dict[str, str],
        class_order: dict,
        tutor: User,
    ) -> None:
        created = client.post(
            f"{API}/tutor-switch",
            headers=student_headers,
            json={"regular_class_id": class_order["regular_class"]["id"], "reason": "Switch"},
        ).json()

        response = client.patch(
            f"{API}/tutor-switch/{created['id']}",
            headers=admin_headers,
            json={"status": "resolved", "to_tutor_id": tutor.id},
        )
        assert response.status_code == 400
