# backend/tuitiontime/routes/v1/wallet.py
"""
Wallet routes - API v1

Endpoints:
    GET / - Balance of the current user's wallet
    GET /transactions - Paginated wallet history
    POST /topup - Open a Razorpay order to add funds
    POST /topup/verify - Credit the wallet once the payment checks out
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_current_active_user, get_payment_gateway
from ...api.dependencies.services import get_wallet_service
from ...core.constants import MAX_PAGE_SIZE, WALLET_TRANSACTIONS_PAGE_SIZE
from ...core.exceptions import DomainException
from ...core.money import to_paise
from ...errors import handle_domain_exception
from ...integrations.razorpay_client import RazorpayClient
from ...models.user import User
from ...schemas.base import PaymentVerifyRequest
from ...schemas.wallet import (
    TopupOrderResponse,
    TopupRequest,
    WalletResponse,
    WalletTransactionResponse,
    WalletTransactionsResponse,
)
from ...services.wallet_service import WalletService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["wallet-v1"])


@router.get("", response_model=WalletResponse)
async def get_wallet(
    current_user: User = Depends(get_current_active_user),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletResponse:
    wallet = await asyncio.to_thread(wallet_service.get_balance, current_user)
    return WalletResponse.model_validate(wallet)


@router.get("/transactions", response_model=WalletTransactionsResponse)
async def get_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(WALLET_TRANSACTIONS_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_active_user),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletTransactionsResponse:
    wallet, items, total = await asyncio.to_thread(
        wallet_service.list_transactions, current_user, page, limit
    )
    return WalletTransactionsResponse(
        items=[WalletTransactionResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        per_page=limit,
        has_next=page * limit < total,
        has_prev=page > 1,
        balance=wallet.balance,
    )


@router.post("/topup", response_model=TopupOrderResponse)
async def create_topup(
    payload: TopupRequest,
    current_user: User = Depends(get_current_active_user),
    wallet_service: WalletService = Depends(get_wallet_service),
    gateway: RazorpayClient = Depends(get_payment_gateway),
) -> TopupOrderResponse:
    try:
        payment, order = await asyncio.to_thread(
            wallet_service.create_topup_order, current_user, payload.amount, gateway
        )
        return TopupOrderResponse(
            order_id=order["id"],
            amount=payment.amount,
            amount_paise=to_paise(payment.amount),
            currency=payment.currency,
            key_id=gateway.key_id,
            receipt=order.get("receipt"),
            payment_record_id=payment.id,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/topup/verify", response_model=WalletResponse)
async def verify_topup(
    payload: PaymentVerifyRequest,
    current_user: User = Depends(get_current_active_user),
    wallet_service: WalletService = Depends(get_wallet_service),
    gateway: RazorpayClient = Depends(get_payment_gateway),
) -> WalletResponse:
    try:
        wallet = await asyncio.to_thread(
            wallet_service.verify_topup,
            current_user,
            payload.order_id,
            payload.payment_id,
            payload.signature,
            gateway,
        )
        return WalletResponse.model_validate(wallet)
    except DomainException as e:
        handle_domain_exception(e)
