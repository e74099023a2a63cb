# backend/tuitiontime/schemas/availability.py
"""Tutor availability slot schemas."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field, model_validator

from ..core.enums import SlotType
from ..core.timezone_utils import ensure_utc
from .base import StandardizedModel, StrictRequestModel


class SlotInput(StrictRequestModel):
    start_time: datetime
    end_time: datetime
    slot_type: SlotType = SlotType.DEMO

    @model_validator(mode="after")
    def check_range(self) -> "SlotInput":
        if ensure_utc(self.end_time) <= ensure_utc(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class SetSlotsRequest(StrictRequestModel):
    slots: List[SlotInput] = Field(..., min_length=1, max_length=200)


class SlotResponse(StandardizedModel):
    id: str
    tutor_id: str
    start_time: datetime
    end_time: datetime
    is_booked: bool
    slot_type: str
    duration_minutes: int


class SetSlotsResponse(BaseModel):
    created: List[SlotResponse] = Field(default_factory=list)
    updated: List[SlotResponse] = Field(default_factory=list)
    skipped: List[SlotResponse] = Field(default_factory=list)
