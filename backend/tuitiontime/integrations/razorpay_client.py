"""Razorpay gateway client: order creation and signature verification."""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import SecretStr
import razorpay
from razorpay.errors import (
    BadRequestError,
    GatewayError,
    ServerError,
    SignatureVerificationError,
)
import requests

logger = logging.getLogger(__name__)

_SDK_ERRORS = (
    (BadRequestError, 400, "BAD_REQUEST_ERROR"),
    (GatewayError, 502, "GATEWAY_ERROR"),
    (ServerError, 502, "SERVER_ERROR"),
)


class RazorpayError(RuntimeError):
    """Raised when the Razorpay API responds with an error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        *,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


def verify_webhook_signature(body: bytes, signature: str | None, webhook_secret: str) -> bool:
    """Validate the ``X-Razorpay-Signature`` header against the raw request body."""
    if not (body and signature and webhook_secret):
        return False
    try:
        payload = body.decode("utf-8")
    except UnicodeDecodeError:
        return False
    try:
        razorpay.Utility().verify_webhook_signature(payload, signature, webhook_secret)
    except SignatureVerificationError:
        return False
    return True


class RazorpayClient:
    """Orders API and checkout verification on top of the Razorpay SDK."""

    def __init__(
        self,
        *,
        key_id: str,
        key_secret: str | SecretStr,
        base_url: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        secret_value = (
            key_secret.get_secret_value() if isinstance(key_secret, SecretStr) else key_secret
        )
        if not key_id or not secret_value:
            raise ValueError("Razorpay key id and secret must be provided")

        self.key_id = key_id
        self._timeout = timeout
        options = {"base_url": base_url.rstrip("/")} if base_url else {}
        self._client = razorpay.Client(auth=(key_id, secret_value), **options)

    def create_order(
        self,
        *,
        amount_paise: int,
        currency: str,
        receipt: str,
        notes: Dict[str, str] | None = None,
    ) -> Dict[str, Any]:
        """Create an order; ``amount_paise`` is in the smallest currency unit."""
        data: Dict[str, Any] = {
            "amount": amount_paise,
            "currency": currency,
            "receipt": receipt[:40],
            "payment_capture": 1,
        }
        if notes:
            data["notes"] = notes
        try:
            return self._client.order.create(data=data, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.error("Razorpay request failure creating order %s: %s", data["receipt"], exc)
            raise RazorpayError("Failed to reach Razorpay API") from exc
        except (BadRequestError, GatewayError, ServerError) as exc:
            status_code, error_code = next(
                (status, code) for error, status, code in _SDK_ERRORS if isinstance(exc, error)
            )
            logger.error("Razorpay API error %s creating order: %s", error_code, exc)
            raise RazorpayError(
                f"Razorpay rejected the order: {exc}",
                status_code=status_code,
                error_code=error_code,
            ) from exc

    def verify_payment(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check the signature Razorpay Checkout returned for ``order_id|payment_id``."""
        if not (order_id and payment_id and signature):
            return False
        try:
            self._client.utility.verify_payment_signature(
                {
                    "razorpay_order_id": order_id,
                    "razorpay_payment_id": payment_id,
                    "razorpay_signature": signature,
                }
            )
        except SignatureVerificationError:
            return False
        return True


def compute_payment_signature(order_id: str, payment_id: str, key_secret: str) -> str:
    return hmac.new(
        key_secret.encode("utf-8"), f"{order_id}|{payment_id}".encode("utf-8"), hashlib.sha256
    ).hexdigest()


def compute_webhook_signature(body: bytes, webhook_secret: str) -> str:
    return hmac.new(webhook_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


class FakeRazorpayClient(RazorpayClient):
    """
    In-memory stand-in used when Razorpay keys are not configured.

    Orders never leave the process. ``sign`` plays the part of Razorpay
    Checkout, so verification still runs through the SDK.
    """

    def __init__(self, key_secret: str = "fake-razorpay-secret") -> None:
        super().__init__(key_id="rzp_test_fake", key_secret=key_secret)
        self._key_secret = key_secret
        self.orders: Dict[str, Dict[str, Any]] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    def create_order(
        self,
        *,
        amount_paise: int,
        currency: str,
        receipt: str,
        notes: Dict[str, str] | None = None,
    ) -> Dict[str, Any]:
        order_id = f"order_fake_{uuid4().hex[:14]}"
        order = {
            "id": order_id,
            "entity": "order",
            "amount": amount_paise,
            "currency": currency,
            "receipt": receipt[:40],
            "status": "created",
            "notes": notes or {},
        }
        self.orders[order_id] = order
        self._logger.debug("Fake order created", extra={"order_id": order_id})
        return order

    def sign(self, order_id: str, payment_id: str) -> str:
        """Produce the checkout signature a real payment would carry."""
        return compute_payment_signature(order_id, payment_id, self._key_secret)
