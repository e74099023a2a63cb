# backend/tuitiontime/schemas/enquiry.py
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .base import StandardizedModel, StrictRequestModel


def _required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


class EnquiryCreate(StrictRequestModel):
    tutor_id: str = Field(..., min_length=1)
    subject: Optional[str] = Field(None, max_length=120)
    message: str = Field(..., min_length=1, max_length=5000)

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        return _required_text(value)


class EnquiryReply(StrictRequestModel):
    reply: str = Field(..., min_length=1, max_length=5000)

    @field_validator("reply")
    @classmethod
    def reply_not_blank(cls, value: str) -> str:
        return _required_text(value)


class EnquiryResponse(StandardizedModel):
    id: str
    student_id: str
    tutor_id: str
    subject: Optional[str] = None
    message: str
    reply: Optional[str] = None
    replied_at: Optional[datetime] = None
    status: str
    created_at: datetime
