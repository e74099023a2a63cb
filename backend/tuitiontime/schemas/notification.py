# backend/tuitiontime/schemas/notification.py
from datetime import datetime
from typing import Any, Dict, Optional

from .base import StandardizedModel


class NotificationResponse(StandardizedModel):
    id: str
    title: str
    body: str
    meta: Optional[Dict[str, Any]] = None
    is_read: bool
    created_at: datetime


class AdminNotificationResponse(StandardizedModel):
    id: str
    title: str
    message: str
    meta: Optional[Dict[str, Any]] = None
    is_read: bool
    created_at: datetime
