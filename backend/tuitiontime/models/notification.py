# backend/tuitiontime/models/notification.py
"""Admin feed notifications and per-user in-app notifications."""

from sqlalchemy import JSON, Boolean, Column, ForeignKey, String, Text
import ulid

from ..database import Base
from .types import TimestampMixin


class AdminNotification(TimestampMixin, Base):
    __tablename__ = "admin_notifications"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    meta = Column(JSON, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False, index=True)


class Notification(TimestampMixin, Base):
    __tablename__ = "notifications"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    meta = Column(JSON, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
