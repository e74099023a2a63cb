# backend/tuitiontime/repositories/notification_repository.py
"""Admin feed and in-app notification storage."""

from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..models.notification import AdminNotification, Notification
from .base_repository import BaseRepository


class AdminNotificationRepository(BaseRepository[AdminNotification]):
    def __init__(self, db: Session):
        super().__init__(db, AdminNotification)

    def list_recent(
        self, *, unread_only: bool = False, page: int = 1, per_page: int = 50
    ) -> Tuple[List[AdminNotification], int]:
        query = self.db.query(AdminNotification)
        if unread_only:
            query = query.filter(AdminNotification.is_read.is_(False))
        query = query.order_by(
            AdminNotification.is_read.asc(),
            AdminNotification.created_at.desc(),
            AdminNotification.id.desc(),
        )
        return self._paginate(query, page, per_page)

    def mark_all_read(self) -> int:
        result = self.db.execute(
            update(AdminNotification)
            .where(AdminNotification.is_read.is_(False))
            .values(is_read=True)
        )
        return int(result.rowcount or 0)


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, db: Session):
        super().__init__(db, Notification)

    def list_for_user(self, user_id: str, *, unread_only: bool = False) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return self._execute(query.order_by(Notification.created_at.desc()).limit(100))

    def get_for_user(self, notification_id: str, user_id: str) -> Optional[Notification]:
        return self.find_one_by(id=notification_id, user_id=user_id)
