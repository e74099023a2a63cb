# backend/tuitiontime/schemas/booking.py
"""
Booking schemas for the TuitionTime platform.

A booking request names the exact slot range it wants; the service matches
it against the tutor's published slots of the same type.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator, model_validator

from ..core.constants import MAX_RATING, MIN_RATING
from ..core.enums import BookingStatus, BookingType
from ..core.timezone_utils import ensure_utc
from .base import GatewayOrderResponse, Money, StandardizedModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    tutor_id: str = Field(..., min_length=1, description="Tutor user id")
    subject: str = Field(..., min_length=1, max_length=120)
    booking_date: date = Field(..., description="Calendar date of the class (UTC)")
    start_time: datetime
    end_time: datetime
    booking_type: BookingType = BookingType.DEMO
    note: Optional[str] = Field(None, max_length=1000)

    @field_validator("subject")
    @classmethod
    def strip_subject(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Subject is required")
        return value

    @model_validator(mode="after")
    def check_range(self) -> "BookingCreate":
        start, end = ensure_utc(self.start_time), ensure_utc(self.end_time)
        if end <= start:
            raise ValueError("end_time must be after start_time")
        if start.date() != self.booking_date:
            raise ValueError("booking_date must match the start time's date")
        return self


class BookingStatusUpdate(StrictRequestModel):
    status: BookingStatus


class BookingRatingRequest(StrictRequestModel):
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    feedback: Optional[str] = Field(None, max_length=2000)


class BookingResponse(StandardizedModel):
    id: str
    student_id: str
    tutor_id: str
    slot_id: Optional[str] = None
    subscription_id: Optional[str] = None
    subject: str
    booking_date: date
    start_time: datetime
    end_time: datetime
    booking_type: str
    amount: Money
    status: str
    payment_status: str
    payment_order_id: Optional[str] = None
    escrow_amount: Money
    meeting_link: Optional[str] = None
    meeting_duration_minutes: Optional[int] = None
    note: Optional[str] = None
    rating: Optional[int] = None
    feedback: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime


class BookingOrderResponse(GatewayOrderResponse):
    booking_id: str
