from typing import Any, Dict

import pytest
from razorpay.errors import BadRequestError, ServerError
import requests

from tuitiontime.integrations.razorpay_client import (
    FakeRazorpayClient,
    RazorpayClient,
    RazorpayError,
    compute_payment_signature,
    compute_webhook_signature,
    verify_webhook_signature,
)


@pytest.fixture
def client() -> RazorpayClient:
    return RazorpayClient(key_id="rzp_test", key_secret="secret")


class TestSignatures:
    def test_checkout_signature_checked_by_sdk(self, client: RazorpayClient) -> None:
        signature = compute_payment_signature("order_1", "pay_1", "secret")
        assert client.verify_payment("order_1", "pay_1", signature)
        assert not client.verify_payment("order_1", "pay_2", signature)

    def test_missing_fields_never_verify(self, client: RazorpayClient) -> None:
        assert not client.verify_payment("order_1", "pay_1", "")
        assert not client.verify_payment("", "pay_1", "abc")

    def test_webhook_signature_is_over_raw_body(self) -> None:
        body = b'{"event":"payment.captured"}'
        signature = compute_webhook_signature(body, "whsec")
        assert verify_webhook_signature(body, signature, "whsec")
        assert not verify_webhook_signature(body + b" ", signature, "whsec")
        assert not verify_webhook_signature(body, None, "whsec")
        assert not verify_webhook_signature(body, signature, "")


class TestRazorpayClient:
    def test_requires_credentials(self) -> None:
        with pytest.raises(ValueError):
            RazorpayClient(key_id="", key_secret="secret")

    def test_create_order_sends_paise_amount(
        self, client: RazorpayClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        captured: Dict[str, Any] = {}

        def fake_create(data: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
            captured["data"] = data
            captured["timeout"] = kwargs.get("timeout")
            return {"id": "order_abc", "amount": data["amount"]}

        monkeypatch.setattr(client._client.order, "create", fake_create)
        order = client.create_order(amount_paise=50000, currency="INR", receipt="R" * 60)

        assert order["id"] == "order_abc"
        assert captured["data"]["amount"] == 50000
        assert captured["data"]["currency"] == "INR"
        assert len(captured["data"]["receipt"]) == 40
        assert captured["timeout"] == 10.0

    @pytest.mark.parametrize(
        "error,status_code,error_code",
        [
            (BadRequestError("amount too small"), 400, "BAD_REQUEST_ERROR"),
            (ServerError("upstream down"), 502, "SERVER_ERROR"),
        ],
    )
    def test_sdk_errors_raise(
        self,
        client: RazorpayClient,
        monkeypatch: pytest.MonkeyPatch,
        error: Exception,
        status_code: int,
        error_code: str,
    ) -> None:
        def fake_create(data: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
            raise error

        monkeypatch.setattr(client._client.order, "create", fake_create)
        with pytest.raises(RazorpayError) as exc_info:
            client.create_order(amount_paise=100, currency="INR", receipt="r")
        assert exc_info.value.status_code == status_code
        assert exc_info.value.error_code == error_code

    def test_network_failure_raises(
        self, client: RazorpayClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def fake_create(data: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
            raise requests.ConnectionError("no route to host")

        monkeypatch.setattr(client._client.order, "create", fake_create)
        with pytest.raises(RazorpayError) as exc_info:
            client.create_order(amount_paise=100, currency="INR", receipt="r")
        assert exc_info.value.status_code is None


def test_fake_client_signs_its_own_orders() -> None:
    fake = FakeRazorpayClient()
    order = fake.create_order(amount_paise=1000, currency="INR", receipt="r1")
    signature = fake.sign(order["id"], "pay_1")

    assert order["id"] in fake.orders
    assert fake.verify_payment(order["id"], "pay_1", signature)
    assert not fake.verify_payment(order["id"], "pay_2", signature)
