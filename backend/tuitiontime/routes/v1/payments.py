# backend/tuitiontime/routes/v1/payments.py
"""
Payment routes - API v1

Endpoints:
    POST /webhook - Razorpay webhook (signed with X-Razorpay-Signature)
    GET / - Payments and payouts, filtered (admin)
    GET /summary - Ledger health (admin)
    POST /payouts/generate - Create payouts for class payments in a period (admin)
    POST /payouts/{payout_id}/settle - Mark a payout paid to the tutor (admin)
    GET /{payment_id} - Payment details (admin)
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, Request

from ...api.dependencies import require_admin
from ...api.dependencies.services import get_payment_service
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...core.enums import GatewayPaymentStatus, GatewayPaymentType
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.base import PaginatedResponse
from ...schemas.payment import GeneratePayoutsRequest, PaymentResponse, WebhookAck
from ...schemas.wallet import LedgerHealthResponse
from ...services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments-v1"])


@router.post("/webhook", response_model=WebhookAck)
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: Optional[str] = Header(None),
    payment_service: PaymentService = Depends(get_payment_service),
) -> WebhookAck:
    """
    Receive Razorpay payment events.

    The signature covers the raw body, so it is read before any parsing.
    Deliveries that were already applied are acknowledged as ``duplicate``.
    """
    body = await request.body()
    try:
        outcome = await asyncio.to_thread(
            payment_service.handle_webhook, body, x_razorpay_signature
        )
        return WebhookAck(status=outcome)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=PaginatedResponse[PaymentResponse])
async def list_payments(
    payment_type: Optional[GatewayPaymentType] = Query(None),
    status_filter: Optional[GatewayPaymentStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    _: User = Depends(require_admin),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaginatedResponse[PaymentResponse]:
    payments, total = await asyncio.to_thread(
        payment_service.list_payments,
        payment_type=payment_type.value if payment_type else None,
        status=status_filter.value if status_filter else None,
        page=page,
        per_page=per_page,
    )
    return PaginatedResponse[PaymentResponse].from_page(
        items=[PaymentResponse.model_validate(payment) for payment in payments],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/summary", response_model=LedgerHealthResponse)
async def ledger_summary(
    _: User = Depends(require_admin),
    payment_service: PaymentService = Depends(get_payment_service),
) -> LedgerHealthResponse:
    summary = await asyncio.to_thread(payment_service.summary)
    return LedgerHealthResponse(**summary)


@router.post("/payouts/generate", response_model=List[PaymentResponse])
async def generate_payouts(
    payload: GeneratePayoutsRequest,
    _: User = Depends(require_admin),
    payment_service: PaymentService = Depends(get_payment_service),
) -> List[PaymentResponse]:
    try:
        payouts = await asyncio.to_thread(
            payment_service.generate_payouts, payload.period_start, payload.period_end
        )
        return [PaymentResponse.model_validate(payout) for payout in payouts]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/payouts/{payout_id}/settle", response_model=PaymentResponse)
async def settle_payout(
    payout_id: str,
    _: User = Depends(require_admin),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    try:
        payout = await asyncio.to_thread(payment_service.settle_payout, payout_id)
        return PaymentResponse.model_validate(payout)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: str,
    _: User = Depends(require_admin),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    try:
        payment = await asyncio.to_thread(payment_service.get_payment, payment_id)
        return PaymentResponse.model_validate(payment)
    except DomainException as e:
        handle_domain_exception(e)
