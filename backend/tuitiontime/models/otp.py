# backend/tuitiontime/models/otp.py
"""One-time password requests issued for phone login and signup."""

from sqlalchemy import Boolean, Column, Integer, String

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import TimestampMixin, UTCDateTime


class OtpRequest(TimestampMixin, Base):
    __tablename__ = "otp_requests"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    phone = Column(String(10), nullable=False, index=True)
    purpose = Column(String(10), nullable=False)
    code_hash = Column(String(64), nullable=False)
    expires_at = Column(UTCDateTime(), nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    consumed = Column(Boolean, nullable=False, default=False)
