# backend/tuitiontime/models/enquiry.py
from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import EnquiryStatus
from ..database import Base
from .types import TimestampMixin, UTCDateTime


class Enquiry(TimestampMixin, Base):
    """Question sent by a student to a tutor before booking."""

    __tablename__ = "enquiries"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    tutor_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    subject = Column(String(120), nullable=True)
    message = Column(Text, nullable=False)
    reply = Column(Text, nullable=True)
    replied_at = Column(UTCDateTime(), nullable=True)
    status = Column(String(10), nullable=False, default=EnquiryStatus.OPEN.value)

    student = relationship("User", foreign_keys=[student_id])
    tutor = relationship("User", foreign_keys=[tutor_id])
