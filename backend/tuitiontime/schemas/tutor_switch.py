# backend/tuitiontime/schemas/tutor_switch.py
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ..core.enums import SwitchRequestStatus
from .base import StandardizedModel, StrictRequestModel


class TutorSwitchCreate(StrictRequestModel):
    regular_class_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, max_length=2000)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("reason is required")
        return value


class TutorSwitchUpdate(StrictRequestModel):
    status: SwitchRequestStatus
    to_tutor_id: Optional[str] = None
    admin_note: Optional[str] = Field(None, max_length=2000)


class TutorSwitchResponse(StandardizedModel):
    id: str
    student_id: str
    regular_class_id: str
    from_tutor_id: str
    to_tutor_id: Optional[str] = None
    reason: str
    admin_note: Optional[str] = None
    status: str
    created_at: datetime
