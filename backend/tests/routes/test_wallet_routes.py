from typing import Dict

from fastapi.testclient import TestClient

from tuitiontime.integrations.razorpay_client import FakeRazorpayClient

API = "/api/v1/wallet"


class TestWalletRoutes:
    def test_new_wallet_is_empty(self, client: TestClient, student_headers: Dict[str, str]) -> None:
        response = client.get(API, headers=student_headers)

        assert response.status_code == 200
        assert response.json()["balance"] == 0.0
        assert response.json()["currency"] == "INR"

    def test_topup_flow(
        self,
        client: TestClient,
        student_headers: Dict[str, str],
        gateway: FakeRazorpayClient,
    ) -> None:
        order = client.post(f"{API}/topup", headers=student_headers, json={"amount": 250.5})
        assert order.status_code == 200
        order = order.json()
        assert order["amount_paise"] == 25050

        verify = {
            "razorpay_order_id": order["order_id"],
            "razorpay_payment_id": "pay_topup_1",
            "razorpay_signature": gateway.sign(order["order_id"], "pay_topup_1"),
        }
        first = client.post(f"{API}/topup/verify", headers=student_headers, json=verify)
        again = client.post(f"{API}/topup/verify", headers=student_headers, json=verify)

        assert first.json()["balance"] == 250.5
        assert again.json()["balance"] == 250.5

        history = client.get(f"{API}/transactions", headers=student_headers).json()
        assert history["balance"] == 250.5
        assert history["total"] == 1
        assert history["items"][0]["transaction_type"] == "credit"

    def test_topup_rejects_bad_signature(
        self, client: TestClient, student_headers: Dict[str, str]
    ) -> None:
        order = client.post(f"{API}/topup", headers=student_headers, json={"amount": 100}).json()
        response = client.post(
            f"{API}/topup/verify",
            headers=student_headers,
            json={
                "razorpay_order_id": order["order_id"],
                "razorpay_payment_id": "pay_x",
                "razorpay_signature": "nope",
            },
        )

        assert response.status_code == 422
        assert response.json()["code"] == "PAYMENT_VERIFICATION_FAILED"

    def test_topup_amount_must_be_positive(
        self, client: TestClient, student_headers: Dict[str, str]
    ) -> None:
        response = client.post(f"{API}/topup", headers=student_headers, json={"amount": 0})
        assert response.status_code == 422
