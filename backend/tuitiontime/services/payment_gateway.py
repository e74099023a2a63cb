# backend/tuitiontime/services/payment_gateway.py
"""
Gateway helpers shared by the checkout flows.

Order creation happens before any database transaction is opened; the
order id returned here is what later verification calls are keyed on.
"""

import logging
import time
from decimal import Decimal
from typing import Any, Dict, Optional

from ..core.config import settings
from ..core.exceptions import PaymentGatewayException, PaymentVerificationException
from ..core.money import to_paise
from ..integrations.razorpay_client import RazorpayClient, RazorpayError

logger = logging.getLogger(__name__)


def build_receipt(prefix: str, owner_id: str) -> str:
    """``PREFIX-<last 6 of owner id>-<epoch ms>``."""
    return f"{prefix}-{owner_id[-6:]}-{int(time.time() * 1000)}"


def create_gateway_order(
    gateway: RazorpayClient,
    amount: Decimal,
    receipt: str,
    notes: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    try:
        order = gateway.create_order(
            amount_paise=to_paise(amount),
            currency=settings.currency,
            receipt=receipt,
            notes=notes,
        )
    except RazorpayError as e:
        logger.error(f"Gateway order creation failed for receipt {receipt}: {str(e)}")
        raise PaymentGatewayException(
            "Could not create payment order", status_code=e.status_code
        ) from e
    logger.info(f"Created gateway order {order.get('id')} for receipt {receipt}")
    return order


def verify_checkout_signature(
    gateway: RazorpayClient, order_id: str, payment_id: str, signature: str
) -> None:
    if not order_id or not payment_id or not signature:
        raise PaymentVerificationException("Missing payment verification fields")
    if not gateway.verify_payment(order_id, payment_id, signature):
        logger.warning(f"Signature mismatch for order {order_id}, payment {payment_id}")
        raise PaymentVerificationException("Invalid payment signature")
