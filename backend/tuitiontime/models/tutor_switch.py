# backend/tuitiontime/models/tutor_switch.py
from sqlalchemy import Column, ForeignKey, String, Text
import ulid

from ..core.enums import SwitchRequestStatus
from ..database import Base
from .types import TimestampMixin


class TutorSwitchRequest(TimestampMixin, Base):
    """A student's request to move a regular class to another tutor."""

    __tablename__ = "tutor_switch_requests"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    regular_class_id = Column(String(26), ForeignKey("regular_classes.id"), nullable=False)
    from_tutor_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    to_tutor_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    reason = Column(Text, nullable=False)
    admin_note = Column(Text, nullable=True)
    status = Column(String(12), nullable=False, default=SwitchRequestStatus.OPEN.value)
