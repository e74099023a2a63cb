"""External service integrations for the TuitionTime platform."""

from .razorpay_client import (
    FakeRazorpayClient,
    RazorpayClient,
    RazorpayError,
    verify_webhook_signature,
)

__all__ = [
    "FakeRazorpayClient",
    "RazorpayClient",
    "RazorpayError",
    "verify_webhook_signature",
]
