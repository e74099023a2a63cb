# backend/tuitiontime/repositories/otp_repository.py
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..models.otp import OtpRequest
from .base_repository import BaseRepository


class OtpRepository(BaseRepository[OtpRequest]):
    """OTP request storage."""

    def __init__(self, db: Session):
        super().__init__(db, OtpRequest)

    def get_for_phone(self, request_id: str, phone: str) -> Optional[OtpRequest]:
        return self.find_one_by(id=request_id, phone=phone)

    def invalidate_open_requests(self, phone: str, purpose: str) -> int:
        """Mark earlier unconsumed requests as used so only the newest code works."""
        result = self.db.execute(
            update(OtpRequest)
            .where(
                OtpRequest.phone == phone,
                OtpRequest.purpose == purpose,
                OtpRequest.consumed.is_(False),
            )
            .values(consumed=True)
        )
        return int(result.rowcount or 0)
