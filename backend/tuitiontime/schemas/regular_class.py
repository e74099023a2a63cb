# backend/tuitiontime/schemas/regular_class.py
"""Regular class and class session schemas."""

import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from ..core.constants import TIME_OF_DAY_PATTERN
from ..core.enums import PlanType
from .base import GatewayOrderResponse, Money, StandardizedModel, StrictRequestModel

DayOfWeek = Literal["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class TimeSlot(StrictRequestModel):
    day_of_week: DayOfWeek
    time: str = Field(..., pattern=TIME_OF_DAY_PATTERN)


class StartRegularClassRequest(StrictRequestModel):
    booking_id: str = Field(..., min_length=1, description="Demo booking being upgraded")
    plan_type: PlanType = PlanType.MONTHLY
    sessions_per_week: int = Field(2, ge=1, le=14)
    time_slots: List[TimeSlot] = Field(default_factory=list)
    start_date: Optional[date] = None
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)

    @model_validator(mode="after")
    def custom_plan_has_amount(self) -> "StartRegularClassRequest":
        if self.plan_type == PlanType.CUSTOM.value and self.amount is None:
            raise ValueError("amount is required for custom plans")
        return self


class RegularClassResponse(StandardizedModel):
    id: str
    student_id: str
    tutor_id: str
    demo_booking_id: Optional[str] = None
    subject: str
    plan_type: str
    sessions_per_week: int
    time_slots: List[Dict[str, Any]] = Field(default_factory=list)
    start_date: datetime
    amount: Money
    currency: str
    payment_status: str
    payment_ref: Optional[str] = None
    status: str
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    created_at: datetime


class RegularClassOrderResponse(GatewayOrderResponse):
    regular_class: RegularClassResponse
    payment_record_id: str


class SessionSlot(StrictRequestModel):
    date: dt.date
    start_time: str = Field(..., pattern=TIME_OF_DAY_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)


class ClassSessionCreate(SessionSlot):
    regular_class_id: str = Field(..., min_length=1)


class BulkSessionCreate(StrictRequestModel):
    regular_class_id: str = Field(..., min_length=1)
    sessions: List[SessionSlot] = Field(..., min_length=1, max_length=100)


class AttendanceRequest(StrictRequestModel):
    attendance: Literal["present", "absent"]
    tutor_notes: Optional[str] = Field(None, max_length=2000)


class ClassSessionResponse(StandardizedModel):
    id: str
    regular_class_id: str
    tutor_id: str
    student_id: str
    start_datetime: datetime
    end_datetime: datetime
    meeting_link: Optional[str] = None
    status: str
    attendance: str
    tutor_notes: Optional[str] = None


class SkippedSession(BaseModel):
    index: int
    reason: str


class BulkSessionResponse(BaseModel):
    created: List[ClassSessionResponse] = Field(default_factory=list)
    skipped: List[SkippedSession] = Field(default_factory=list)
