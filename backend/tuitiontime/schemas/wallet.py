# backend/tuitiontime/schemas/wallet.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from .base import GatewayOrderResponse, Money, PaginatedResponse, StandardizedModel, StrictRequestModel


class WalletResponse(StandardizedModel):
    id: str
    user_id: Optional[str] = None
    role: str
    balance: Money
    currency: str


class WalletTransactionResponse(StandardizedModel):
    id: str
    entry_id: str
    transaction_type: str
    amount: Money
    balance_after: Money
    description: Optional[str] = None
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    status: str
    created_at: datetime


class WalletTransactionsResponse(PaginatedResponse[WalletTransactionResponse]):
    balance: Money


class TopupRequest(StrictRequestModel):
    amount: Decimal = Field(..., gt=0, le=100000, decimal_places=2)


class TopupOrderResponse(GatewayOrderResponse):
    payment_record_id: str


class LedgerHealthResponse(BaseModel):
    total: Money
    balanced: bool
