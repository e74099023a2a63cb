from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tuitiontime.core.enums import UserStatus
from tuitiontime.models.user import User

from tests.helpers.builders import ADMIN_PASSWORD

API = "/api/v1/auth"


def _signup(client: TestClient, phone: str, role: str = "student") -> dict:
    sent = client.post(f"{API}/otp/send", json={"phone": phone, "purpose": "signup"})
    assert sent.status_code == 200
    response = client.post(
        f"{API}/otp/verify",
        json={
            "phone": phone,
            "request_id": sent.json()["request_id"],
            "code": "123456",
            "purpose": "signup",
            "role": role,
        },
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestOtpRoutes:
    def test_signup_returns_tokens_and_user(self, client: TestClient) -> None:
        body = _signup(client, "9811111111", "tutor")

        assert body["is_new_user"] is True
        assert body["user"]["role"] == "tutor"
        assert body["user"]["is_profile_complete"] is False

        me = client.get(f"{API}/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["phone"] == "9811111111"

    def test_invalid_phone_is_a_validation_problem(self, client: TestClient) -> None:
        response = client.post(f"{API}/otp/send", json={"phone": "12ab"})

        assert response.status_code == 422
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["code"] == "validation_error"

    def test_wrong_code_reports_attempts_left(self, client: TestClient, student: User) -> None:
        sent = client.post(f"{API}/otp/send", json={"phone": student.phone}).json()
        response = client.post(
            f"{API}/otp/verify",
            json={"phone": student.phone, "request_id": sent["request_id"], "code": "000000"},
        )

        assert response.status_code == 400
        problem = response.json()
        assert problem["code"] == "OTP_INVALID"
        assert problem["errors"]["attempts_left"] == 4

    def test_suspended_account_cannot_log_in(
        self, client: TestClient, db: Session, student: User
    ) -> None:
        student.status = UserStatus.SUSPENDED.value
        db.commit()
        sent = client.post(f"{API}/otp/send", json={"phone": student.phone}).json()

        response = client.post(
            f"{API}/otp/verify",
            json={"phone": student.phone, "request_id": sent["request_id"], "code": "123456"},
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Account is suspended"

    def test_login_for_unknown_phone(self, client: TestClient) -> None:
        sent = client.post(f"{API}/otp/send", json={"phone": "9822222222"}).json()
        response = client.post(
            f"{API}/otp/verify",
            json={"phone": "9822222222", "request_id": sent["request_id"], "code": "123456"},
        )
        assert response.status_code == 404


class TestTokenRoutes:
    def test_refresh_and_logout(self, client: TestClient) -> None:
        tokens = _signup(client, "9833333333")

        refreshed = client.post(f"{API}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert refreshed.status_code == 200
        new_tokens = refreshed.json()

        logout = client.post(
            f"{API}/logout", headers={"Authorization": f"Bearer {new_tokens['access_token']}"}
        )
        assert logout.status_code == 200
        assert logout.json()["success"] is True

        again = client.post(f"{API}/refresh", json={"refresh_token": new_tokens["refresh_token"]})
        assert again.status_code == 401

    def test_me_requires_token(self, client: TestClient) -> None:
        response = client.get(f"{API}/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_garbage_token(self, client: TestClient) -> None:
        response = client.get(f"{API}/me", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401


class TestAdminLoginRoute:
    def test_admin_login(self, client: TestClient) -> None:
        response = client.post(
            f"{API}/admin/login", json={"username": "admin", "password": ADMIN_PASSWORD}
        )
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"

    def test_admin_login_rejects_bad_password(self, client: TestClient) -> None:
        response = client.post(f"{API}/admin/login", json={"username": "admin", "password": "x"})
        assert response.status_code == 401
        assert response.json()["status"] == 401
