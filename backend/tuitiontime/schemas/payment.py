# backend/tuitiontime/schemas/payment.py
from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, model_validator

from .base import Money, StandardizedModel, StrictRequestModel


class PaymentResponse(StandardizedModel):
    id: str
    payment_type: str
    user_id: Optional[str] = None
    tutor_id: Optional[str] = None
    regular_class_id: Optional[str] = None
    booking_id: Optional[str] = None
    source_payment_id: Optional[str] = None
    gateway: str
    gateway_order_id: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    amount: Money
    currency: str
    commission_percent: Optional[Money] = None
    commission_amount: Optional[Money] = None
    tutor_net_amount: Optional[Money] = None
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    status: str
    paid_at: Optional[datetime] = None
    settled_at: Optional[datetime] = None
    notes: Optional[Dict[str, Any]] = None
    created_at: datetime


class GeneratePayoutsRequest(StrictRequestModel):
    period_start: date
    period_end: date

    @model_validator(mode="after")
    def check_period(self) -> "GeneratePayoutsRequest":
        if self.period_end < self.period_start:
            raise ValueError("period_end must not be before period_start")
        return self


class WebhookAck(BaseModel):
    received: bool = True
    status: str
