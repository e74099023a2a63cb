from typing import Dict

import pytest
from fastapi.testclient import TestClient

from tuitiontime.models.availability import AvailabilitySlot
from tuitiontime.models.user import User

from tests.helpers.builders import auth_headers

API = "/api/v1/users"

STUDENT_PROFILE = {
    "name": "Asha Student",
    "email": "asha.new@example.com",
    "city": "Pune",
    "track": "school",
    "board": "CBSE",
    "class_level": "10",
    "subjects": ["Maths", " ", "Maths", "Science"],
}

TUTOR_PROFILE = {
    "name": "Kiran Tutor",
    "email": "kiran@example.com",
    "gender": "male",
    "qualification": "MA English",
    "subjects": ["English"],
    "hourly_rate": 350,
    "monthly_rate": 3000,
    "bio": "Ten years of spoken English classes",
}


class TestProfileRoutes:
    def test_student_profile_upsert(
        self, client: TestClient, student: User, student_headers: Dict[str, str]
    ) -> None:
        response = client.put(f"{API}/student-profile", headers=student_headers, json=STUDENT_PROFILE)

        assert response.status_code == 200, response.text
        assert response.json()["subjects"] == ["Maths", "Science"]

        profile = client.get(f"{API}/profile", headers=student_headers).json()
        assert profile["user"]["is_profile_complete"] is True
        assert profile["student_profile"]["email"] == "asha.new@example.com"
        assert profile["tutor_profile"] is None

    @pytest.mark.parametrize(
        "track,missing",
        [("school", "class_level"), ("college", "program"), ("competitive", "exam")],
    )
    def test_track_fields_are_required(
        self, client: TestClient, student_headers: Dict[str, str], track: str, missing: str
    ) -> None:
        payload = {"name": "Asha", "email": "asha@example.com", "track": track}

        response = client.put(f"{API}/student-profile", headers=student_headers, json=payload)

        assert response.status_code == 422
        assert missing in response.text

    def test_tutor_cannot_write_student_profile(
        self, client: TestClient, tutor_headers: Dict[str, str]
    ) -> None:
        response = client.put(f"{API}/student-profile", headers=tutor_headers, json=STUDENT_PROFILE)
        assert response.status_code == 403

    def test_tutor_profile_and_kyc(
        self, client: TestClient, other_tutor: User
    ) -> None:
        headers = auth_headers(other_tutor)
        updated = client.put(f"{API}/tutor-profile", headers=headers, json=TUTOR_PROFILE)
        assert updated.status_code == 200, updated.text
        assert updated.json()["hourly_rate"] == 350.0

        kyc = client.post(
            f"{API}/tutor-kyc",
            headers=headers,
            json={
                "aadhaar_urls": ["https://files.example.com/a-front.jpg"],
                "pan_url": "https://files.example.com/pan.jpg",
                "bank_proof_url": "https://files.example.com/cheque.jpg",
            },
        )
        assert kyc.status_code == 200
        assert kyc.json()["kyc_status"] == "submitted"

    def test_approved_kyc_cannot_be_resubmitted(
        self, client: TestClient, tutor_headers: Dict[str, str]
    ) -> None:
        response = client.post(
            f"{API}/tutor-kyc",
            headers=tutor_headers,
            json={
                "aadhaar_urls": ["a.jpg"],
                "pan_url": "p.jpg",
                "bank_proof_url": "b.jpg",
            },
        )
        assert response.status_code == 409
        assert response.json()["code"] == "KYC_APPROVED"

    def test_too_many_aadhaar_images(self, client: TestClient, tutor_headers: Dict[str, str]) -> None:
        response = client.post(
            f"{API}/tutor-kyc",
            headers=tutor_headers,
            json={"aadhaar_urls": ["1", "2", "3"], "pan_url": "p", "bank_proof_url": "b"},
        )
        assert response.status_code == 422


class TestTutorDirectory:
    def test_public_tutor_and_slots(
        self, client: TestClient, tutor: User, demo_slot: AvailabilitySlot
    ) -> None:
        detail = client.get(f"/api/v1/tutors/{tutor.id}")
        assert detail.status_code == 200
        assert detail.json()["name"] == "Meera Tutor"
        assert "email" not in detail.json()

        slots = client.get(f"/api/v1/tutors/{tutor.id}/slots").json()
        assert [slot["id"] for slot in slots] == [demo_slot.id]

    def test_unknown_tutor(self, client: TestClient, student: User) -> None:
        assert client.get(f"/api/v1/tutors/{student.id}").status_code == 404

    def test_anonymous_search_uses_filters(self, client: TestClient, tutor: User, other_tutor: User) -> None:
        response = client.get("/api/v1/tutors/search", params={"sort": "hourlyRate_asc"})

        body = response.json()
        assert body["mode"] == "filter"
        assert [item["name"] for item in body["items"]] == ["Kiran Tutor", "Meera Tutor"]

    def test_student_search_requires_tutor(
        self, client: TestClient, student_headers: Dict[str, str]
    ) -> None:
        response = client.get("/api/v1/students/search", headers=student_headers)
        assert response.status_code == 403


class TestEnquiryRoutes:
    def test_enquiry_reply_and_close(
        self,
        client: TestClient,
        tutor: User,
        student_headers: Dict[str, str],
        tutor_headers: Dict[str, str],
    ) -> None:
        created = client.post(
            "/api/v1/enquiries",
            headers=student_headers,
            json={"tutor_id": tutor.id, "subject": "Maths", "message": "Do you teach calculus?"},
        )
        assert created.status_code == 201
        enquiry_id = created.json()["id"]

        inbox = client.get("/api/v1/enquiries/mine", headers=tutor_headers).json()
        assert [item["id"] for item in inbox] == [enquiry_id]

        replied = client.post(
            f"/api/v1/enquiries/{enquiry_id}/reply",
            headers=tutor_headers,
            json={"reply": "Yes, up to class 12."},
        )
        assert replied.json()["status"] == "replied"

        closed = client.post(f"/api/v1/enquiries/{enquiry_id}/close", headers=student_headers)
        assert closed.json()["status"] == "closed"

        again = client.post(
            f"/api/v1/enquiries/{enquiry_id}/reply", headers=tutor_headers, json={"reply": "Hello?"}
        )
        assert again.status_code == 422

    def test_enquiry_to_non_tutor(
        self, client: TestClient, other_student: User, student_headers: Dict[str, str]
    ) -> None:
        response = client.post(
            "/api/v1/enquiries",
            headers=student_headers,
            json={"tutor_id": other_student.id, "message": "Hi"},
        )
        assert response.status_code == 404


class TestNotificationRoutes:
    def test_booking_creates_inbox_entry(
        self,
        client: TestClient,
        tutor: User,
        demo_slot: AvailabilitySlot,
        student_headers: Dict[str, str],
        tutor_headers: Dict[str, str],
    ) -> None:
        client.post(
            "/api/v1/bookings",
            headers=student_headers,
            json={
                "tutor_id": tutor.id,
                "subject": "Maths",
                "booking_date": demo_slot.start_time.date().isoformat(),
                "start_time": demo_slot.start_time.isoformat(),
                "end_time": demo_slot.end_time.isoformat(),
            },
        )

        inbox = client.get("/api/v1/notifications", headers=tutor_headers).json()
        assert len(inbox) == 1
        assert inbox[0]["is_read"] is False

        read = client.post(f"/api/v1/notifications/{inbox[0]['id']}/read", headers=tutor_headers)
        assert read.json()["is_read"] is True

        unread = client.get(
            "/api/v1/notifications", headers=tutor_headers, params={"unread_only": True}
        ).json()
        assert unread == []

    def test_cannot_read_someone_elses_notification(
        self, client: TestClient, student_headers: Dict[str, str]
    ) -> None:
        response = client.post("/api/v1/notifications/missing/read", headers=student_headers)
        assert response.status_code == 404
