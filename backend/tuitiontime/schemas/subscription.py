# backend/tuitiontime/schemas/subscription.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import GatewayOrderResponse, Money, StandardizedModel, StrictRequestModel
from .booking import BookingResponse


class SubscriptionCheckoutRequest(StrictRequestModel):
    tutor_id: str = Field(..., min_length=1)
    sessions_per_week: Optional[int] = Field(None, ge=1, le=14)
    subject: Optional[str] = Field(None, max_length=120)


class SubscriptionCheckoutResponse(GatewayOrderResponse):
    tutor_id: str
    sessions_per_week: int


class SubscriptionResponse(StandardizedModel):
    id: str
    student_id: str
    tutor_id: str
    plan: str
    subject: Optional[str] = None
    amount: Money
    currency: str
    sessions_per_week: int
    status: str
    payment_status: str
    payment_order_id: str
    start_date: datetime
    end_date: datetime
    generated_bookings_count: int
    bookings: List[BookingResponse] = Field(default_factory=list)
    created_at: datetime
